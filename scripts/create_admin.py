#!/usr/bin/env python
# -*- coding: utf-8 -*-
"""
Create or promote a Shoebox admin

Admins can revoke any share link and purge expired ones. Passwords are
hashed through Flask-Security with the configured salt, so the account can
log in at /login right away.

Usage:
  python scripts/create_admin.py                                  # prompts for everything
  python scripts/create_admin.py --email alice@example.com --username alice
  python scripts/create_admin.py --email alice@example.com --reset-password
"""

import sys
import os
import argparse
import getpass
import logging
import uuid

# Add parent directory to path so we can import app modules
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from flask_security.utils import hash_password
from peewee import fn

from web import app, user_datastore
from db import db, User, create_tables

logger = logging.getLogger('shoebox')

ADMIN_ROLE = 'admin'


def find_user(email):
  return User.get_or_none(fn.LOWER(User.email) == email.strip().lower())


def ensure_admin(email, password=None, username=None):
  """Create the user if missing, optionally set a new password, and grant the admin role

  Returns (user, created).
  Raises ValueError when a new user has no password.
  """
  with app.app_context():
    role = user_datastore.find_or_create_role(
      name=ADMIN_ROLE,
      description='Can revoke any share and purge expired ones'
    )

    user = find_user(email)
    created = user is None
    if created:
      if not password:
        raise ValueError('A password is required for a new user')
      user = User.create(
        email=email.strip(),
        username=username or None,
        password=hash_password(password),
        active=True,
        fs_uniquifier=uuid.uuid4().hex
      )
    elif password:
      user.password = hash_password(password)
      user.save()

    granted = user_datastore.add_role_to_user(user, role)

  logger.info('ADMIN_READY user=%s created=%s role_granted=%s', user.id, created, bool(granted))
  return user, created


def prompt_password():
  while True:
    password = getpass.getpass('Password: ')
    if not password:
      print('Password is required')
      continue
    if password != getpass.getpass('Confirm password: '):
      print("Passwords don't match, try again")
      continue
    return password


def main(argv=None):
  parser = argparse.ArgumentParser(description='Create or promote a Shoebox admin')
  parser.add_argument('--email', help='admin e-mail (prompted when missing)')
  parser.add_argument('--username', help='optional display name for a new user')
  parser.add_argument('--reset-password', action='store_true',
                      help='set a new password when the user already exists')
  args = parser.parse_args(argv)

  if not app.config.get('SECURITY_PASSWORD_SALT'):
    print('ERROR: SECURITY_PASSWORD_SALT is not set')
    return 1

  email = (args.email or input('Admin email: ')).strip()
  if not email:
    print('Email is required')
    return 1

  db.connect(reuse_if_open=True)
  try:
    create_tables()
    existing = find_user(email)
    password = None
    if existing is None:
      username = args.username or input('Username (optional): ').strip() or None
      password = prompt_password()
    else:
      username = None
      print(f'User {existing.email} already exists, granting admin role')
      if args.reset_password:
        password = prompt_password()

    user, created = ensure_admin(email, password=password, username=username)
  finally:
    db.close()

  print(f"{'Created' if created else 'Updated'} admin {user.email}")
  return 0


if __name__ == '__main__':
  try:
    sys.exit(main())
  except KeyboardInterrupt:
    print('\nCancelled')
    sys.exit(1)
