import os

from setuptools import setup

rootpath = os.path.abspath(os.path.dirname(__file__))


# Extract version
def extract_version(module='honyaku'):
    version = None
    fname = os.path.join(rootpath, module, '__init__.py')
    with open(fname) as f:
        for line in f:
            if line.startswith('__version__'):
                _, version = line.split('=')
                version = version.strip()[1:-1]  # Remove quotation characters.
                break
    return version


deps = [
    "asphalt>=4.0.0,<5.0.0",
    "werkzeug>=2.3.0",
    "tzdata",
]

setup(
    name='Honyaku',
    version=extract_version(),
    packages=[
        'honyaku',
        'honyaku.renderers',
    ],
    license='MIT',
    description='Content negotiated body formatters, parsers and template views for werkzeug and asphalt',
    classifiers=[
        "Development Status :: 4 - Beta",
        "License :: OSI Approved :: MIT License",
        "Programming Language :: Python :: 3 :: Only",
        "Programming Language :: Python :: 3.9",
        "Topic :: Internet",
        "Topic :: Software Development :: Libraries",
        "Topic :: Software Development :: Libraries :: Application Frameworks"
    ],
    python_requires=">=3.9",
    install_requires=deps,
    extras_require={
        "jinja2": ["jinja2>=3.0.0"],
        "mako": ["mako>=1.1.0"],
        "test": [
            "pytest",
            "pytest-asyncio",
            "jinja2>=3.0.0",
            "mako>=1.1.0",
        ],
    }
)
