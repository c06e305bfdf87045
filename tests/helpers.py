#!/usr/bin/env python
# -*- coding: utf-8 -*-
"""
Shared setup for tests that need a database
"""

import unittest
import tempfile
import datetime
import uuid
import os

from db import (db, MODELS, User, Role, UserRoles, Photo, Album, Tag, Category,
                PhotoAlbum, PhotoTag, PhotoCategory)


class DatabaseTestCase(unittest.TestCase):
    """Point the application database at a fresh temporary file"""

    def setUp(self):
        """Create a temporary database for testing"""
        self.test_db_fd, self.test_db_path = tempfile.mkstemp(suffix='.db')
        if not db.is_closed():
            db.close()
        db.init(self.test_db_path, pragmas={'foreign_keys': 1})
        db.connect()
        db.create_tables(MODELS)

    def tearDown(self):
        """Close and remove test database"""
        if not db.is_closed():
            db.close()
        os.close(self.test_db_fd)
        os.unlink(self.test_db_path)


def make_user(email, username=None, admin=False):
    user = User.create(
        email=email,
        username=username,
        password='not-a-real-hash',
        fs_uniquifier=str(uuid.uuid4())
    )
    if admin:
        role, _ = Role.get_or_create(name='admin')
        UserRoles.create(user=user, role=role)
    return user


def make_photo(user, title=None, ts=None):
    photo = Photo.create(
        user=user,
        filename=f'{uuid.uuid4().hex}.jpg',
        filepath='uploads/',
        mimetype='image/jpeg',
        size=1024,
        title=title,
        ts=ts or datetime.datetime.now()
    )
    return photo


def make_album(user, name, photos=()):
    album = Album.create(user=user, name=name)
    for position, photo in enumerate(photos, start=1):
        PhotoAlbum.create(photo=photo, album=album, position=position)
    return album


def make_tag(name, photos=()):
    tag = Tag.create(name=name)
    for photo in photos:
        PhotoTag.create(photo=photo, tag=tag)
    return tag


def make_category(name, photos=()):
    category = Category.create(name=name)
    for photo in photos:
        PhotoCategory.create(photo=photo, category=category)
    return category
