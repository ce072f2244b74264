"""
In-memory Store

Holds claims, supplements and parties for the running service (would be a
database in production). Lookups raise NotFoundError for unknown ids.
"""
from typing import Dict, List

from claimflow.core.exceptions import NotFoundError
from claimflow.core.models import Claim, Party, Supplement

CONTRACTOR = "contractor"
ESTIMATOR = "estimator"


class ClaimStore:
    def __init__(self):
        self.claims: Dict[str, Claim] = {}
        self.supplements: Dict[str, Supplement] = {}
        self.parties: Dict[str, Dict[str, Party]] = {CONTRACTOR: {}, ESTIMATOR: {}}

    def get_claim(self, claim_id: str) -> Claim:
        claim = self.claims.get(claim_id)
        if claim is None:
            raise NotFoundError("claim", claim_id)
        return claim

    def get_supplement(self, supplement_id: str) -> Supplement:
        supplement = self.supplements.get(supplement_id)
        if supplement is None:
            raise NotFoundError("supplement", supplement_id)
        return supplement

    def get_party(self, role: str, party_id: str) -> Party:
        party = self.parties[role].get(party_id)
        if party is None:
            raise NotFoundError(role, party_id)
        return party

    def supplements_for(self, claim_id: str) -> List[Supplement]:
        """All supplements of a claim, in sequence order."""
        found = [s for s in self.supplements.values() if s.claim_id == claim_id]
        return sorted(found, key=lambda s: s.sequence)

    def next_sequence(self, claim_id: str) -> int:
        existing = self.supplements_for(claim_id)
        return existing[-1].sequence + 1 if existing else 1

    def list_claims(self) -> List[Claim]:
        return list(self.claims.values())

    def clear(self) -> None:
        self.claims.clear()
        self.supplements.clear()
        for parties in self.parties.values():
            parties.clear()
