"""
Static resolver adapter - Implements ResolverCapability protocol.

Serves per-label payloads from an in-process table. Name owners bind a
resolver by its identity; the registrar hands lookups to it after checking
the identity matches.
"""


class StaticResolver:
    """
    Implements ResolverCapability protocol with an in-memory record table.

    Uses structural subtyping - no explicit inheritance from Protocol.
    Records are keyed by (owner, label) so a transferred name stops
    resolving to its previous owner's payload.
    """

    def __init__(self, identity: str) -> None:
        self.identity = identity
        self._records: dict[tuple[str, str], bytes] = {}

    def publish(self, label: str, owner: str, payload: bytes) -> None:
        self._records[(owner, label)] = payload

    def resolve(self, label: str, owner: str) -> bytes | None:
        return self._records.get((owner, label))
