"""
Tickets Module

Counter sale and on-train verification of tickets.

- Standard tickets are sold for a train, class and seat between two halts of
  that train; platform tickets are sold at the seller's working station.
- Verification checks a travel id in a fixed order (not found, expired,
  already verified, valid) and writes one audit log row per attempt.
- The "verified" flag is set with a single conditional update, so a ticket
  can only ever be verified once.

Key Components:
- utils.py: Travel-id generation, expiry calculation and seat labels
- repository.py: Storage operations used by issuance and verification
- issuance_service.py: Standard and platform ticket issuance
- verification_service.py: Verification state machine and audit log queries
- service.py: Ticket listing and lookup
- router.py: FastAPI endpoints
"""
