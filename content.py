#! /usr/bin/env python

"""Content references and the resolver behind share grants

A grant points at one of four unrelated tables. Each kind gets its own
reference class carrying a typed id, and the resolver dispatches on the
reference class to the loader for that kind.
"""

import enum
import logging
from dataclasses import dataclass

from db import (Photo, Album, Tag, Category, PhotoAlbum, PhotoTag,
                PhotoCategory)
from errors import InvalidContentKind, ValidationError
from util import format_datetime

logger = logging.getLogger('shoebox')


class ContentKind(enum.Enum):
    PHOTO = 'photo'
    ALBUM = 'album'
    TAG = 'tag'
    CATEGORY = 'category'

    @property
    def ownership_checked(self):
        """Photos and albums belong to a user. Tags and categories are a
        vocabulary shared by every user, so anyone may share them."""
        return self in OWNERSHIP_CHECKED

    @classmethod
    def parse(cls, value):
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value).strip().lower())
        except ValueError:
            raise InvalidContentKind(
                f'Invalid content type: {value!r}',
                allowed=[kind.value for kind in cls])


OWNERSHIP_CHECKED = frozenset([ContentKind.PHOTO, ContentKind.ALBUM])


@dataclass(frozen=True)
class PhotoRef:
    photo_id: int
    kind = ContentKind.PHOTO

    @property
    def content_id(self):
        return self.photo_id


@dataclass(frozen=True)
class AlbumRef:
    album_id: int
    kind = ContentKind.ALBUM

    @property
    def content_id(self):
        return self.album_id


@dataclass(frozen=True)
class TagRef:
    tag_id: int
    kind = ContentKind.TAG

    @property
    def content_id(self):
        return self.tag_id


@dataclass(frozen=True)
class CategoryRef:
    category_id: int
    kind = ContentKind.CATEGORY

    @property
    def content_id(self):
        return self.category_id


REF_TYPES = {
    ContentKind.PHOTO: PhotoRef,
    ContentKind.ALBUM: AlbumRef,
    ContentKind.TAG: TagRef,
    ContentKind.CATEGORY: CategoryRef,
}


# SQLite INTEGER range
ID_MIN = -2**63
ID_MAX = 2**63 - 1


def _parse_id(kind, content_id):
    # bool is an int subclass, floats would be truncated
    if isinstance(content_id, int) and not isinstance(content_id, bool):
        value = content_id
    elif isinstance(content_id, str) and content_id.strip().lstrip('-').isdigit():
        try:
            value = int(content_id.strip())
        except ValueError:
            value = None
    else:
        value = None

    if value is None or not ID_MIN <= value <= ID_MAX:
        raise ValidationError(f'Invalid {kind.value} id: {content_id!r}')
    return value


def make_ref(kind, content_id):
    """Build the typed reference for a (kind, id) pair.

    Ids must be integers or strings of digits within the database integer
    range.

    Raises InvalidContentKind for a kind outside the closed set and
    ValidationError for any other id.
    """
    kind = ContentKind.parse(kind)
    return REF_TYPES[kind](_parse_id(kind, content_id))


# Serializers

def photo_to_dict(photo):
    return {
        'id': photo.id,
        'user_id': photo.user_id,
        'filename': photo.filename,
        'filepath': photo.filepath,
        'mimetype': photo.mimetype,
        'size': photo.size,
        'title': photo.title,
        'description': photo.description,
        'location': photo.location,
        'equipment': photo.equipment,
        'datetaken': format_datetime(photo.datetaken),
        'uploaded': format_datetime(photo.ts),
    }


def _named_to_dict(entity):
    return {'id': entity.id, 'name': entity.name}


# Loaders, one per kind. Each returns (owner_id, payload) or None.

def _load_photo(ref, owner_id):
    photo = Photo.get_or_none(Photo.id == ref.photo_id)
    if photo is None:
        return None
    tags = (Tag.select().join(PhotoTag)
            .where(PhotoTag.photo == photo.id).order_by(Tag.name))
    categories = (Category.select().join(PhotoCategory)
                  .where(PhotoCategory.photo == photo.id).order_by(Category.name))
    albums = (Album.select().join(PhotoAlbum)
              .where(PhotoAlbum.photo == photo.id).order_by(Album.name))
    payload = {
        'kind': ContentKind.PHOTO.value,
        'photo': photo_to_dict(photo),
        'tags': [_named_to_dict(t) for t in tags],
        'categories': [_named_to_dict(c) for c in categories],
        'albums': [_named_to_dict(a) for a in albums],
    }
    return photo.user_id, payload


def _load_album(ref, owner_id):
    album = Album.get_or_none(Album.id == ref.album_id)
    if album is None:
        return None
    photos = (Photo.select().join(PhotoAlbum)
              .where(PhotoAlbum.album == album.id)
              .order_by(PhotoAlbum.position.asc(), Photo.id.asc()))
    payload = {
        'kind': ContentKind.ALBUM.value,
        'album': {
            'id': album.id,
            'user_id': album.user_id,
            'name': album.name,
            'description': album.description,
            'created': format_datetime(album.ts),
        },
        'photos': [photo_to_dict(p) for p in photos],
    }
    return album.user_id, payload


def _load_tag(ref, owner_id):
    tag = Tag.get_or_none(Tag.id == ref.tag_id)
    if tag is None:
        return None
    # Tags are shared vocabulary, only the grant owner's photos are exposed
    photos = (Photo.select().join(PhotoTag)
              .where((PhotoTag.tag == tag.id) & (Photo.user == owner_id))
              .order_by(Photo.ts.desc(), Photo.id.desc()))
    payload = {
        'kind': ContentKind.TAG.value,
        'tag': _named_to_dict(tag),
        'photos': [photo_to_dict(p) for p in photos],
    }
    return None, payload


def _load_category(ref, owner_id):
    category = Category.get_or_none(Category.id == ref.category_id)
    if category is None:
        return None
    photos = (Photo.select().join(PhotoCategory)
              .where((PhotoCategory.category == category.id) & (Photo.user == owner_id))
              .order_by(Photo.ts.desc(), Photo.id.desc()))
    payload = {
        'kind': ContentKind.CATEGORY.value,
        'category': _named_to_dict(category),
        'photos': [photo_to_dict(p) for p in photos],
    }
    return None, payload


LOADERS = {
    PhotoRef: _load_photo,
    AlbumRef: _load_album,
    TagRef: _load_tag,
    CategoryRef: _load_category,
}


def _load(ref, owner_id):
    try:
        loader = LOADERS[type(ref)]
    except KeyError:
        raise InvalidContentKind(f'Unsupported content reference: {ref!r}')
    return loader(ref, owner_id)


def resolve(ref, owner_id):
    """Fetch the payload for a reference, or None if the id does not exist.

    owner_id restricts tag and category feeds to photos that user authored.
    """
    loaded = _load(ref, owner_id)
    if loaded is None:
        return None
    return loaded[1]


def resolve_owned(ref, owner_id):
    """Like resolve(), but None also when an owned kind belongs to someone else"""
    loaded = _load(ref, owner_id)
    if loaded is None:
        return None
    content_owner, payload = loaded
    if ref.kind.ownership_checked and content_owner != owner_id:
        logger.info('CONTENT_NOT_OWNED kind=%s id=%d owner=%s requester=%s',
                    ref.kind.value, ref.content_id, content_owner, owner_id)
        return None
    return payload
