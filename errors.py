#! /usr/bin/env python

"""Error taxonomy for sharing

Every error carries a machine readable kind and an HTTP status so the web
layer can render it as structured JSON instead of a page.
"""


class ShareError(Exception):
    """Base class for all sharing failures"""
    status_code = 500
    kind = None

    def __init__(self, message, **details):
        super().__init__(message)
        self.message = message
        self.details = details

    @property
    def error_kind(self):
        return self.kind or self.__class__.__name__

    def to_dict(self):
        payload = {'error': self.error_kind, 'message': self.message}
        payload.update(self.details)
        return payload


# 400 - malformed or empty input, raised before any mutation

class ValidationError(ShareError):
    status_code = 400


class EmptySelection(ValidationError):
    pass


class InvalidContentKind(ValidationError):
    pass


# 401

class AuthenticationRequired(ShareError):
    status_code = 401


# 404 - token, content or recipient absent

class NotFoundError(ShareError):
    status_code = 404


class ShareNotFound(NotFoundError):
    pass


class RecipientNotFound(NotFoundError):
    pass


# 403 - requester does not own the item, or the grant does not cover the caller

class AuthorizationError(ShareError):
    status_code = 403


class ItemNotAuthorized(AuthorizationError):
    pass


class AccessDenied(AuthorizationError):
    pass


class ExpiredError(ShareError):
    status_code = 403


class ShareExpired(ExpiredError):
    pass


# 500 - storage or notification collaborator failed

class DependencyError(ShareError):
    status_code = 500


class DuplicateToken(DependencyError):
    pass


class NotificationError(DependencyError):
    pass
