#! /usr/bin/env python

"""Share grants: token issuing, storage, batch creation and access"""

import datetime
import logging
import secrets
from collections import namedtuple

from peewee import IntegrityError, PeeweeException, fn

from app import app
from db import db, User, ShareGrant
from content import ID_MIN, ID_MAX, make_ref, resolve, resolve_owned
from errors import (ValidationError, EmptySelection, RecipientNotFound,
                    ItemNotAuthorized, ShareNotFound, AuthorizationError,
                    AccessDenied, ShareExpired, DependencyError,
                    DuplicateToken, NotificationError)
from mailer import send_mail, compose_share_notification
from security import AccessDecision, decide_access, can_revoke_grant
from util import format_datetime

logger = logging.getLogger('shoebox')

STATUS_SUCCESS = 'Success'
STATUS_NOTIFICATION_FAILED = 'NotificationFailed'

ShareLink = namedtuple('ShareLink', ['kind', 'content_id', 'token', 'url', 'expires_at'])
BatchResult = namedtuple('BatchResult', ['status', 'links', 'recipient_id', 'is_public',
                                         'notification_error'])
ShareAccess = namedtuple('ShareAccess', ['grant', 'payload'])


# Tokens

def issue_token(nbytes=None):
  """Unguessable url-safe token, 128 bits by default

  Uniqueness is enforced by the unique index on ShareGrant.token, not here.
  """
  if nbytes is None:
    nbytes = app.config.get('SHARE_TOKEN_BYTES', 16)
  return secrets.token_urlsafe(nbytes)


def token_hint(token):
  """Short token prefix for log lines, never log the whole credential"""
  return (token or '')[:6]


# Storage

def grant_ref(grant):
  return make_ref(grant.content_kind, grant.content_id)


def create_grant(token, owner_id, ref, recipient_id=None, expires_at=None, is_public=False):
  """Insert one grant.

  Runs in its own savepoint so a token collision leaves an enclosing
  transaction usable.

  Raises:
    DuplicateToken: the token is already taken
    DependencyError: any other storage failure
  """
  try:
    with db.atomic():
      grant = ShareGrant.create(
        token=token,
        owner=owner_id,
        recipient=recipient_id,
        content_kind=ref.kind.value,
        content_id=ref.content_id,
        expires_at=expires_at,
        is_public=bool(is_public)
      )
  except IntegrityError as e:
    if 'sharegrant.token' in str(e):
      raise DuplicateToken('Share token already exists')
    raise DependencyError(f'Could not store share grant: {e}')
  except PeeweeException as e:
    raise DependencyError(f'Could not store share grant: {e}')
  return grant


def find_by_token(token):
  if not token:
    return None
  return ShareGrant.get_or_none(ShareGrant.token == token)


def find_by_owner_and_content(owner_id, ref):
  """All grants an owner created for one content item, newest first"""
  return list(ShareGrant.select().where(
    (ShareGrant.owner == owner_id) &
    (ShareGrant.content_kind == ref.kind.value) &
    (ShareGrant.content_id == ref.content_id)
  ).order_by(ShareGrant.created_at.desc(), ShareGrant.id.desc()))


def list_by_owner(owner_id):
  return list(ShareGrant.select()
              .where(ShareGrant.owner == owner_id)
              .order_by(ShareGrant.created_at.desc(), ShareGrant.id.desc()))


def delete_grant(grant_id, requester_id, is_admin=False):
  """Delete a grant; its token stops resolving immediately"""
  grant = None
  if ID_MIN <= grant_id <= ID_MAX:
    grant = ShareGrant.get_or_none(ShareGrant.id == grant_id)
  if grant is None:
    raise ShareNotFound('Share not found')

  if not can_revoke_grant(requester_id, grant, is_admin=is_admin):
    logger.warning('SHARE_REVOKE_DENIED share_id=%d user=%s', grant_id, requester_id)
    raise AuthorizationError('You cannot revoke this share')

  grant.delete_instance()
  logger.info('SHARE_REVOKED share_id=%d kind=%s content_id=%d user=%s admin=%s',
              grant_id, grant.content_kind, grant.content_id, requester_id, is_admin)
  return True


def purge_expired(now=None):
  """Delete grants whose expiration has passed, returns how many went away"""
  if now is None:
    now = datetime.datetime.now()
  deleted = (ShareGrant.delete()
             .where(ShareGrant.expires_at.is_null(False) & (ShareGrant.expires_at < now))
             .execute())
  logger.info('SHARE_PURGE deleted=%d before=%s', deleted, format_datetime(now))
  return deleted


# Identity lookup

def find_user_by_email(email):
  if not email:
    return None
  return User.get_or_none(fn.LOWER(User.email) == email.strip().lower())


# Batch creation

def _mint_grant(owner_id, ref, recipient_id, expires_at, is_public, config):
  """Issue a token and store the grant, retrying on token collisions"""
  attempts = config.get('SHARE_TOKEN_ATTEMPTS', 3)
  for attempt in range(1, attempts + 1):
    token = issue_token(config.get('SHARE_TOKEN_BYTES', 16))
    try:
      grant = create_grant(token, owner_id, ref, recipient_id=recipient_id,
                           expires_at=expires_at, is_public=is_public)
    except DuplicateToken:
      logger.warning('SHARE_TOKEN_COLLISION attempt=%d/%d kind=%s content_id=%d',
                     attempt, attempts, ref.kind.value, ref.content_id)
      continue

    logger.info('SHARE_CREATED share_id=%d kind=%s content_id=%d public=%s recipient=%s expires=%s owner=%s',
                grant.id, ref.kind.value, ref.content_id, bool(is_public),
                recipient_id or 'none', format_datetime(expires_at) or 'never', owner_id)
    return grant

  raise DependencyError(f'Could not issue a unique share token after {attempts} attempts')


def create_shares(owner_id, items, recipient_email=None, is_public=False,
                  expires_at=None, base_url=None, config=None):
  """Create one grant per item for the public or for one named recipient.

  Items are validated in input order before anything is written, and the
  grants of a batch are written in a single transaction, so a failing
  batch leaves no grant behind. The only partial outcome is a notification
  failure after commit, reported as STATUS_NOTIFICATION_FAILED.

  Args:
    owner_id: id of the authenticated user sharing the content
    items: list of (kind, content_id) pairs
    recipient_email: e-mail of the named recipient, ignored when is_public
    is_public: any bearer of the token may open the share
    expires_at: naive local datetime, None for never
    base_url: prefix of the generated links (defaults to SITEURL)
    config: settings mapping (defaults to app.config)

  Raises:
    RecipientNotFound, EmptySelection, InvalidContentKind, ValidationError,
    ItemNotAuthorized, DependencyError
  """
  if config is None:
    config = app.config
  base_url = (base_url or config.get('SITEURL', '')).rstrip('/')

  # sharing mode
  recipient = None
  if not is_public:
    if not recipient_email or not str(recipient_email).strip():
      raise RecipientNotFound('A recipient email is required for a private share')
    recipient = find_user_by_email(str(recipient_email))
    if recipient is None:
      logger.info('SHARE_RECIPIENT_NOT_FOUND owner=%s', owner_id)
      raise RecipientNotFound(f'No user found with email {recipient_email}')

  if not items:
    raise EmptySelection('No items selected for sharing')

  # validate every item before writing anything
  refs = []
  for index, item in enumerate(items):
    try:
      kind, content_id = item
    except (TypeError, ValueError):
      raise ValidationError(f'Item {index} must be a (type, id) pair')
    ref = make_ref(kind, content_id)
    if resolve_owned(ref, owner_id) is None:
      logger.warning('SHARE_ITEM_NOT_AUTHORIZED kind=%s content_id=%d owner=%s index=%d',
                     ref.kind.value, ref.content_id, owner_id, index)
      raise ItemNotAuthorized(
        f'{ref.kind.value.capitalize()} {ref.content_id} does not exist or is not yours to share',
        item={'type': ref.kind.value, 'id': ref.content_id})
    refs.append(ref)

  recipient_id = recipient.id if recipient is not None else None
  links = []
  try:
    with db.atomic():
      for ref in refs:
        grant = _mint_grant(owner_id, ref, recipient_id, expires_at, is_public, config)
        links.append(ShareLink(ref.kind.value, ref.content_id, grant.token,
                               f'{base_url}/share/{grant.token}', expires_at))
  except DependencyError as e:
    logger.error('SHARE_BATCH_ROLLED_BACK owner=%s items=%d error=%s', owner_id, len(refs), e.message)
    raise

  status = STATUS_SUCCESS
  notification_error = None
  if recipient is not None:
    owner = User.get_by_id(owner_id)
    subject, body = compose_share_notification(owner, links)
    try:
      send_mail(recipient.email, subject, body, config)
    except NotificationError as e:
      # grants are committed and stay valid
      status = STATUS_NOTIFICATION_FAILED
      notification_error = e.message
      logger.warning('SHARE_NOTIFICATION_FAILED owner=%s recipient=%s grants=%d error=%s',
                     owner_id, recipient_id, len(links), e.message)

  logger.info('SHARE_BATCH_COMPLETE owner=%s grants=%d public=%s recipient=%s status=%s',
              owner_id, len(links), bool(is_public), recipient_id or 'none', status)
  return BatchResult(status, links, recipient_id, bool(is_public), notification_error)


# Access

def open_share(token, identity, now=None):
  """Turn a token into the shared payload, or raise why it cannot be opened

  Raises:
    ShareNotFound: unknown token, or the content was deleted after sharing
    ShareExpired: the grant is past expires_at
    AccessDenied: private grant and the caller is neither owner nor recipient
  """
  if now is None:
    now = datetime.datetime.now()

  grant = find_by_token(token)
  decision = decide_access(grant, now, identity)

  if decision is AccessDecision.NOT_FOUND:
    logger.info('SHARE_NOT_FOUND token=%s user=%s', token_hint(token), identity or 'anonymous')
    raise ShareNotFound('Share not found')

  if decision is AccessDecision.EXPIRED:
    logger.info('SHARE_EXPIRED share_id=%d expired=%s user=%s',
                grant.id, format_datetime(grant.expires_at), identity or 'anonymous')
    raise ShareExpired('This share link has expired',
                       expiredAt=format_datetime(grant.expires_at))

  if decision is AccessDecision.DENIED:
    logger.info('SHARE_DENIED share_id=%d user=%s', grant.id, identity or 'anonymous')
    raise AccessDenied('You do not have access to this share',
                       loginRequired=identity is None)

  payload = resolve(grant_ref(grant), grant.owner_id)
  if payload is None:
    logger.info('SHARE_CONTENT_MISSING share_id=%d kind=%s content_id=%d',
                grant.id, grant.content_kind, grant.content_id)
    raise ShareNotFound('The shared content no longer exists')

  logger.info('SHARE_VIEW share_id=%d kind=%s content_id=%d user=%s',
              grant.id, grant.content_kind, grant.content_id, identity or 'anonymous')
  return ShareAccess(grant, payload)
