"""Drawability predicates deciding which matched types are kept."""

from osmtype import type_code as tc


class DrawableTypes:
    """Type codes that resolve to a tree node outside every hidden branch.

    Parameters
    ----------
    classificator : Classificator
    hidden : iterable of str or tuple, optional
        Extra hidden type paths, on top of those declared by the tree.
    """

    def __init__(self, classificator, hidden=()):
        self.classificator = classificator
        paths = list(classificator.hidden) + list(hidden)
        self._hidden = set()
        for path in paths:
            code = classificator.find_type_by_path(path)
            if code is not None:
                self._hidden.add(code)

    def __call__(self, code):
        if tc.get_level(code) == 0:
            return False
        if self.classificator.get_object(code) is None:
            return False
        # walk up to the root
        while tc.get_level(code) > 0:
            if code in self._hidden:
                return False
            code = tc.pop_value(code)
        return True
