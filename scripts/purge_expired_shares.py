#!/usr/bin/env python
# -*- coding: utf-8 -*-
"""
Delete share grants whose expiration has passed

Expired grants already stop resolving at read time; this only reclaims the
rows. Safe to run from cron as often as you like.

Usage:
  python scripts/purge_expired_shares.py            # delete
  python scripts/purge_expired_shares.py --dry-run  # only count
"""

import sys
import os
import argparse
import datetime

# Add parent directory to path so we can import app modules
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from app import app
from db import db, ShareGrant
import shares
import util

logger = util.setup_custom_logger('shoebox', service_name='cli',
                                  log_dir=app.config.get('LOG_DIR', '/app/logs'))

def main():
  parser = argparse.ArgumentParser(description='Purge expired share grants')
  parser.add_argument('--dry-run', action='store_true', help='count expired grants without deleting')
  args = parser.parse_args()

  now = datetime.datetime.now()
  db.connect(reuse_if_open=True)
  try:
    if args.dry_run:
      count = (ShareGrant.select()
               .where(ShareGrant.expires_at.is_null(False) & (ShareGrant.expires_at < now))
               .count())
      print(f'{count} expired share grant(s) would be deleted')
      return 0

    deleted = shares.purge_expired(now)
    print(f'Deleted {deleted} expired share grant(s)')
    return 0
  finally:
    db.close()

if __name__ == '__main__':
  sys.exit(main())
