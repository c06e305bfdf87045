#! /usr/bin/env python

"""Authentication and authorization utilities"""

import enum


class AccessDecision(enum.Enum):
    NOT_FOUND = 'not_found'
    EXPIRED = 'expired'
    DENIED = 'denied'
    ALLOWED = 'allowed'


def is_expired(grant, now):
    """A grant without expires_at never expires"""
    return grant.expires_at is not None and now > grant.expires_at


def decide_access(grant, now, identity):
    """
    Decide whether the caller may open a share grant.

    Rules, first match wins:
    - no grant → NOT_FOUND
    - expires_at set and now past it → EXPIRED (even for the owner)
    - public grant → ALLOWED for anyone, authenticated or not
    - anonymous caller → DENIED (the web layer asks them to log in)
    - caller is the owner or the named recipient → ALLOWED
    - anyone else → DENIED

    Args:
        grant: ShareGrant or None
        now: naive local datetime to evaluate expiration against
        identity: user id of the caller, None when unauthenticated
    """
    if grant is None:
        return AccessDecision.NOT_FOUND

    if is_expired(grant, now):
        return AccessDecision.EXPIRED

    if grant.is_public:
        return AccessDecision.ALLOWED

    if identity is None:
        return AccessDecision.DENIED

    if identity == grant.owner_id:
        return AccessDecision.ALLOWED
    if grant.recipient_id is not None and identity == grant.recipient_id:
        return AccessDecision.ALLOWED

    return AccessDecision.DENIED


def can_revoke_grant(identity, grant, is_admin=False):
    """
    Check if the caller can delete this grant.

    Rules:
    - Admin role: can delete every grant
    - Owner: can delete the grants they created
    - All others (recipients included): cannot delete
    """
    if identity is None:
        return False
    if is_admin:
        return True
    return grant.owner_id == identity
