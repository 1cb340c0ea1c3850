"""
Template view engines.

The engines live in their own modules so that Jinja2 and Mako stay optional.
"""
