#!/usr/bin/env python
# -*- coding: utf-8 -*-
"""
Unit tests for share access decisions and revoke permissions
"""

import unittest
import datetime
from unittest.mock import Mock

from security import AccessDecision, decide_access, is_expired, can_revoke_grant

OWNER = 1
RECIPIENT = 2
STRANGER = 3
NOW = datetime.datetime(2026, 5, 1, 12, 0, 0)


def make_grant(is_public=False, recipient_id=None, expires_at=None):
    return Mock(owner_id=OWNER, recipient_id=recipient_id, is_public=is_public,
                expires_at=expires_at)


class TestExpiry(unittest.TestCase):
    """Test the expiration boundary"""

    def test_no_expiry_never_expires(self):
        """Test grants without expires_at"""
        self.assertFalse(is_expired(make_grant(), NOW))

    def test_boundary_is_still_valid(self):
        """Test a grant opened exactly at expires_at"""
        grant = make_grant(expires_at=NOW)
        self.assertFalse(is_expired(grant, NOW))
        self.assertTrue(is_expired(grant, NOW + datetime.timedelta(microseconds=1)))


class TestDecideAccess(unittest.TestCase):
    """Test the first-match-wins access rules"""

    def test_missing_grant(self):
        """Test unknown tokens are not found"""
        self.assertEqual(decide_access(None, NOW, OWNER), AccessDecision.NOT_FOUND)
        self.assertEqual(decide_access(None, NOW, None), AccessDecision.NOT_FOUND)

    def test_expired_wins_over_everything(self):
        """Test expiry applies to public grants and to the owner"""
        past = NOW - datetime.timedelta(days=1)
        public = make_grant(is_public=True, expires_at=past)
        private = make_grant(recipient_id=RECIPIENT, expires_at=past)

        self.assertEqual(decide_access(public, NOW, None), AccessDecision.EXPIRED)
        self.assertEqual(decide_access(private, NOW, OWNER), AccessDecision.EXPIRED)
        self.assertEqual(decide_access(private, NOW, RECIPIENT), AccessDecision.EXPIRED)

    def test_public_grant(self):
        """Test anyone may open a public grant"""
        grant = make_grant(is_public=True, expires_at=NOW + datetime.timedelta(days=7))
        for identity in [None, OWNER, STRANGER]:
            self.assertEqual(decide_access(grant, NOW, identity), AccessDecision.ALLOWED)

    def test_private_grant(self):
        """Test only the owner and the recipient may open a private grant"""
        grant = make_grant(recipient_id=RECIPIENT)
        self.assertEqual(decide_access(grant, NOW, OWNER), AccessDecision.ALLOWED)
        self.assertEqual(decide_access(grant, NOW, RECIPIENT), AccessDecision.ALLOWED)
        self.assertEqual(decide_access(grant, NOW, STRANGER), AccessDecision.DENIED)
        self.assertEqual(decide_access(grant, NOW, None), AccessDecision.DENIED)

    def test_private_grant_without_recipient(self):
        """Test a private grant with no recipient is owner-only"""
        grant = make_grant()
        self.assertEqual(decide_access(grant, NOW, OWNER), AccessDecision.ALLOWED)
        self.assertEqual(decide_access(grant, NOW, STRANGER), AccessDecision.DENIED)


class TestCanRevoke(unittest.TestCase):
    """Test who may revoke a grant"""

    def test_owner_can_revoke(self):
        """Test owner can revoke their own grant"""
        self.assertTrue(can_revoke_grant(OWNER, make_grant()))

    def test_recipient_cannot_revoke(self):
        """Test the recipient has no revoke rights"""
        self.assertFalse(can_revoke_grant(RECIPIENT, make_grant(recipient_id=RECIPIENT)))

    def test_admin_can_revoke_anything(self):
        """Test admin can revoke other users' grants"""
        self.assertTrue(can_revoke_grant(STRANGER, make_grant(), is_admin=True))

    def test_anonymous_cannot_revoke(self):
        """Test unauthenticated callers"""
        self.assertFalse(can_revoke_grant(None, make_grant()))
        self.assertFalse(can_revoke_grant(None, make_grant(), is_admin=True))


if __name__ == '__main__':
    unittest.main()
