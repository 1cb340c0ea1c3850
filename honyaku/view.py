"""
Template views.

Return a :class:`View` from a route to have it rendered by a registered :class:`~.ViewEngine`.

.. code-block:: python

    return View("index", {"user": user}).put("title", "Home")
"""
import typing


class View(object):
    """
    A named template plus the model to render it with.

    :param name: The template name, without the engine suffix.
    :param model: The values passed to the template.
    :param engine: The name of the engine that must render this view. Empty means any engine.
    """

    def __init__(self, name: str, model: typing.Mapping[str, typing.Any] = None, engine: str = ""):
        if not name:
            raise TypeError("A view name is required.")

        self.name = name
        self.model = dict(model or {})
        self.engine = engine or ""

    def put(self, key: str, value) -> "View":
        """
        Adds a value to the model.

        :return: This view, so calls can be chained.
        """
        self.model[key] = value
        return self

    def __repr__(self):
        return "<View {!r} engine={!r}>".format(self.name, self.engine)
