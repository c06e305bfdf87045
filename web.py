#! /usr/bin/env python

# -*- coding: utf-8 -*-
"""
  Shoebox
  ~~~~~~

  A personal photo organizer. This module serves the share links:
  creating them for photos, albums, tags and categories, and opening them.
"""

import datetime

from flask import request, jsonify, url_for

from flask_security import Security, PeeweeUserDatastore, current_user

from werkzeug.middleware.proxy_fix import ProxyFix

from app import app
from db import db, User, Role, UserRoles
from content import make_ref
from errors import (ShareError, DependencyError, ValidationError,
                    AuthenticationRequired, AuthorizationError, AccessDenied)
from util import setup_custom_logger, parse_datetime, format_datetime
import shares

# Configure Flask to work behind nginx proxy
app.wsgi_app = ProxyFix(app.wsgi_app, x_for=1, x_proto=1, x_host=1, x_port=1, x_prefix=1)

# Setup logging (shared file with the cli scripts)
logger = setup_custom_logger('shoebox', service_name='web',
                             log_dir=app.config.get('LOG_DIR', '/app/logs'))

# Configure Flask's built-in logger to use our custom logger
app.logger.handlers = logger.handlers
app.logger.setLevel(logger.level)

# Setup Flask-Security-Too
user_datastore = PeeweeUserDatastore(db, User, Role, UserRoles)
security = Security(app, user_datastore)

# Ensure database is connected for each request
@app.before_request
def before_request():
  """Connect to database before each request"""
  if db.is_closed():
    db.connect()

@app.teardown_request
def teardown_request(exception):
  """Close database after each request"""
  if not db.is_closed():
    db.close()


# Utility Functions

def get_base_url():
  """Get the base URL dynamically from request"""
  return request.url_root.rstrip('/')

def get_login_url():
  return url_for('security.login', next=request.script_root + request.path)

def current_identity():
  """Id of the logged in user, None for anonymous callers"""
  if current_user and current_user.is_authenticated:
    return current_user.id
  return None

def current_user_is_admin():
  if current_user and current_user.is_authenticated:
    return current_user.has_role('admin')
  return False

def require_identity():
  identity = current_identity()
  if identity is None:
    raise AuthenticationRequired('You need to log in first', loginUrl=get_login_url())
  return identity

def parse_bool(value):
  if isinstance(value, bool):
    return value
  if value is None:
    return False
  return str(value).strip().lower() in ('1', 'true', 'on', 'yes')

def parse_share_request(data):
  """Validate the POST /share body and turn it into create_shares() arguments

  Body: {"items": [{"id": 1, "type": "photo"}, ...], "isPublic": bool,
         "recipientEmail": str, "expiresAt": ISO-8601, "expiresInDays": int}
  """
  if not isinstance(data, dict):
    raise ValidationError('Request body must be a JSON object')

  raw_items = data.get('items')
  if raw_items is None:
    raw_items = []
  if not isinstance(raw_items, list):
    raise ValidationError('items must be a list of {id, type} objects')

  items = []
  for index, raw in enumerate(raw_items):
    if not isinstance(raw, dict) or 'id' not in raw or 'type' not in raw:
      raise ValidationError(f'Item {index} must be an object with id and type')
    items.append((raw['type'], raw['id']))

  expires_at = None
  if data.get('expiresAt'):
    try:
      expires_at = parse_datetime(data['expiresAt'])
    except (TypeError, ValueError):
      raise ValidationError(f"Invalid expiresAt: {data['expiresAt']!r}")
  elif data.get('expiresInDays') not in (None, ''):
    days = data['expiresInDays']
    if isinstance(days, bool) or not isinstance(days, (int, str)):
      raise ValidationError(f'Invalid expiresInDays: {days!r}')
    try:
      days = int(days)
    except ValueError:
      raise ValidationError(f'Invalid expiresInDays: {days!r}')
    if days <= 0:
      raise ValidationError('expiresInDays must be a positive number of days; omit it for a link that never expires')
    try:
      expires_at = datetime.datetime.now() + datetime.timedelta(days=days)
    except OverflowError:
      raise ValidationError(f'expiresInDays is too large: {days}')

  return {
    'items': items,
    'is_public': parse_bool(data.get('isPublic')),
    'recipient_email': data.get('recipientEmail'),
    'expires_at': expires_at,
  }

def grant_to_dict(grant, base_url):
  return {
    'id': grant.id,
    'type': grant.content_kind,
    'contentId': grant.content_id,
    'token': grant.token,
    'url': f'{base_url}/share/{grant.token}',
    'isPublic': grant.is_public,
    'ownerId': grant.owner_id,
    'recipientId': grant.recipient_id,
    'createdAt': format_datetime(grant.created_at),
    'expiresAt': format_datetime(grant.expires_at),
  }

def batch_result_to_dict(result):
  urls = [link.url for link in result.links]
  return {
    'status': result.status,
    'shareLink': urls[0] if urls else None,
    'allShareLinks': urls,
    'shares': [{
      'type': link.kind,
      'id': link.content_id,
      'token': link.token,
      'url': link.url,
      'expiresAt': format_datetime(link.expires_at),
    } for link in result.links],
    'isPublic': result.is_public,
    'recipientId': result.recipient_id,
    'notificationError': result.notification_error,
  }


# Error handlers

@app.errorhandler(ShareError)
def handle_share_error(error):
  if isinstance(error, DependencyError):
    logger.error('SHARE_DEPENDENCY_ERROR kind=%s path=%s message=%s',
                 error.error_kind, request.path, error.message)
  return jsonify(error.to_dict()), error.status_code


# URL Routing

@app.route('/health')
def health():
  """Health check endpoint for Docker healthchecks - no logging"""
  return jsonify({'status': 'ok'}), 200


@app.route('/share', methods=['POST'])
def create_share():
  """Share photos, albums, tags or categories publicly or with one user"""
  owner_id = require_identity()
  params = parse_share_request(request.get_json(silent=True))

  result = shares.create_shares(
    owner_id,
    params['items'],
    recipient_email=params['recipient_email'],
    is_public=params['is_public'],
    expires_at=params['expires_at'],
    base_url=get_base_url()
  )

  return jsonify(batch_result_to_dict(result)), 200


@app.route('/share/<string:token>')
def view_share(token):
  """Open a share link"""
  try:
    access = shares.open_share(token, current_identity())
  except AccessDenied as e:
    if e.details.get('loginRequired'):
      e.details['loginUrl'] = get_login_url()
    raise

  grant = access.grant
  return jsonify({
    'share': {
      'type': grant.content_kind,
      'contentId': grant.content_id,
      'isPublic': grant.is_public,
      'expiresAt': format_datetime(grant.expires_at),
    },
    'content': access.payload,
  })


@app.route('/shares')
def list_shares():
  """List the caller's shares, optionally for one item (?type=photo&id=3)"""
  owner_id = require_identity()

  content_type = request.args.get('type')
  content_id = request.args.get('id')
  if content_type or content_id:
    grants = shares.find_by_owner_and_content(owner_id, make_ref(content_type, content_id))
  else:
    grants = shares.list_by_owner(owner_id)

  base_url = get_base_url()
  return jsonify({'shares': [grant_to_dict(g, base_url) for g in grants]})


@app.route('/shares/<int:share_id>/revoke', methods=['POST'])
def revoke_share(share_id):
  """Revoke a share link"""
  identity = require_identity()
  shares.delete_grant(share_id, identity, is_admin=current_user_is_admin())
  return jsonify({'success': True})


@app.route('/shares/purge-expired', methods=['POST'])
def purge_expired_shares():
  """Admin endpoint: delete grants past their expiration"""
  identity = require_identity()
  if not current_user_is_admin():
    logger.warning('SHARE_PURGE_DENIED user=%s', identity)
    raise AuthorizationError('Admin role required')

  deleted = shares.purge_expired()
  return jsonify({'deleted': deleted})


if __name__ == '__main__':
  app.run(host='0.0.0.0')
