# ============================================================================
# TREE VISITOR
# ============================================================================
# EPOCH: 1 - SCHEMA INFERENCE
# STATUS: Core - Recursive dispatcher over tagged trees
# PURPOSE: Substrate for the database, schema and declaration compilers
# CREATED: 14 OCT 2026
# ============================================================================
"""
Tree Visitor

A node is an atomic value, a list, or a tagged pair ``(tag, payload)``
where ``tag`` is a string. ``Visitor.visit`` dispatches in this order:

1. A handler registered for the pair's tag with ``@visits(tag)``
2. A list: visit each element, return the list of results
3. Any other tagged pair: visit the payload, drop the tag
4. Anything else: returned unchanged

Unknown tags never raise, so newer introspection payloads degrade to
their payload instead of breaking compilation.

Usage:
    class Upper(Visitor):
        @visits("name")
        def visit_name(self, payload, context):
            return payload.upper()

    Upper().visit([("name", "users"), ("other", 1), 2])
    # -> ["USERS", 1, 2]
"""

from typing import Any, Callable, ClassVar, Dict, Optional, Tuple

Node = Tuple[str, Any]
Context = Optional[Dict[str, Any]]


def tagged(tag: str, payload: Any) -> Node:
    """Build a tagged pair."""
    return (tag, payload)


def is_tagged(node: Any) -> bool:
    """True when node is a ``(str, payload)`` pair."""
    return isinstance(node, tuple) and len(node) == 2 and isinstance(node[0], str)


# ============================================================================
# HANDLER REGISTRATION
# ============================================================================

def visits(*tags: str) -> Callable:
    """
    Register a visitor method for one or more tags.

    The method is called as ``method(payload, context)``.
    """
    def decorator(func: Callable) -> Callable:
        func._visit_tags = tags
        return func
    return decorator


class Visitor:
    """
    Base class for tree compilers.

    Subclasses inherit their parents' handlers; a subclass registering
    the same tag replaces the parent handler.
    """

    _handlers: ClassVar[Dict[str, str]] = {}

    def __init_subclass__(cls, **kwargs):
        super().__init_subclass__(**kwargs)
        handlers: Dict[str, str] = {}
        for base in reversed(cls.__mro__[1:]):
            handlers.update(getattr(base, "_handlers", {}))
        for name, attr in cls.__dict__.items():
            for tag in getattr(attr, "_visit_tags", ()):
                handlers[tag] = name
        cls._handlers = handlers

    @classmethod
    def handles(cls, tag: str) -> bool:
        """Check whether a tag has a registered handler."""
        return tag in cls._handlers

    def visit(self, node: Any, context: Context = None) -> Any:
        """Visit a node using the dispatch order above."""
        if is_tagged(node):
            handler = self._handlers.get(node[0])
            if handler is not None:
                return getattr(self, handler)(node[1], context)

        if isinstance(node, list):
            return [self.visit(item, context) for item in node]

        if is_tagged(node):
            return self.visit(node[1], context)

        return node

    def visit_map(self, mapping: Dict[str, Any], context: Context = None) -> Dict[str, Any]:
        """Visit every value of a mapping, keeping keys."""
        return {key: self.visit(value, context) for key, value in mapping.items()}


# ============================================================================
# EXPORTS
# ============================================================================

__all__ = [
    "Node",
    "Context",
    "tagged",
    "is_tagged",
    "visits",
    "Visitor",
]
