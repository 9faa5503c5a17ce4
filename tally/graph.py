"""
Graph: thin runner over nodnod used by checkout and idempotency.

    from tally import graph as G

    @G.node
    class SubtotalNode:
        @classmethod
        def __compose__(cls, request: CheckoutRequest) -> "SubtotalNode":
            ...

    node = await G.compose(SubtotalNode, request, context)

Values are injected under their runtime type, so each injected object
must be an instance of the exact type a node asks for.
"""

from __future__ import annotations

from typing import Any, TypeVar, cast
from collections.abc import Callable, Coroutine, Iterable

from nodnod import EventLoopAgent, Node, Scope, Value
from nodnod import scalar_node as node

T = TypeVar("T")


# ═══════════════════════════════════════════════════════════════════════════════
# Evaluation
# ═══════════════════════════════════════════════════════════════════════════════


async def evaluate(
    target: type[T],
    injections: Iterable[tuple[type[Any], Any]],
) -> T:
    """
    Resolve `target` and every node it depends on.

    nodnod discovers the dependency set from the target's `__compose__`
    signature; independent branches run concurrently on the event loop.
    """
    agent = EventLoopAgent.build({cast(type[Node[Any, Any]], target)})

    scope = Scope(detail=f"tally:{target.__name__}")
    async with scope:
        for typ, value in injections:
            scope.push(Value(typ, value))

        run = cast(
            Callable[[Scope, dict[type[Any], Scope]], Coroutine[Any, Any, None]],
            getattr(agent, "run"),
        )
        await run(scope, {})

        resolved = scope.get(target)
        if resolved is None:
            raise KeyError(f"{target.__name__} was not resolved")
        return cast(T, resolved.value)


async def compose(target: type[T], *inputs: object) -> T:
    """
    One-shot composition, injecting each input under `type(input)`.

    Example:
        placed = await compose(PlaceOrderNode, request, context)
    """
    return await evaluate(target, ((type(value), value) for value in inputs))


__all__ = ("node", "evaluate", "compose")
