#! /usr/bin/env python

import datetime
from peewee import *

from flask_security import UserMixin, RoleMixin

from app import app

# Create database instance with foreign key constraints enabled
db = SqliteDatabase(app.config['DATABASE']['name'], pragmas={'foreign_keys': 1})

class BaseModel(Model):
  class Meta:
    database = db

class Role(BaseModel, RoleMixin):
  name         = CharField(unique=True)
  description  = TextField(null=True)

  def get_permissions(self):
    """Stub for Flask-Principal compatibility (we don't use permissions)"""
    return []


class User(BaseModel, UserMixin):
  email        = TextField(unique=True)
  username     = TextField(unique=True, null=True)
  password     = TextField(null=False)
  active       = BooleanField(default=True)
  confirmed_at = DateTimeField(null=True)
  fs_uniquifier = TextField(unique=True, null=True)  # Required by Flask-Security-Too 5.x
  ts           = DateTimeField(default=lambda: datetime.datetime.now())

  @property
  def roles(self):
    """Return actual Role objects (Flask-Security compatibility)
    Override the Peewee backref to return Role objects instead of UserRoles objects"""
    return [ur.role for ur in UserRoles.select().where(UserRoles.user == self)]

  def has_role(self, role_name):
    """Override to check role by name (Flask-Security compatibility)"""
    for role in self.roles:
      if role.name == role_name:
        return True
    return False

class UserRoles(BaseModel):
  user         = ForeignKeyField(User, backref='user_roles_set', on_delete='CASCADE')
  role         = ForeignKeyField(Role, backref='role_users_set', on_delete='CASCADE')
  name         = property(lambda self: self.role.name)
  description  = property(lambda self: self.role.description)

class Photo(BaseModel):
  user         = ForeignKeyField(User, backref='photos', on_delete='CASCADE')
  filename     = TextField(null=False)
  filepath     = TextField(null=False)
  mimetype     = TextField(null=False)
  size         = IntegerField(null=False)
  title        = TextField(null=True)
  description  = TextField(null=True)
  location     = TextField(null=True)
  equipment    = TextField(null=True)
  datetaken    = DateTimeField(null=True)
  ts           = DateTimeField(default=lambda: datetime.datetime.now())

class Album(BaseModel):
  user         = ForeignKeyField(User, backref='albums', on_delete='CASCADE')
  name         = TextField(null=False)
  description  = TextField(null=True)
  ts           = DateTimeField(default=lambda: datetime.datetime.now())

class Tag(BaseModel):
  name         = TextField(null=False,unique=True)
  ts           = DateTimeField(default=lambda: datetime.datetime.now())

class Category(BaseModel):
  name         = TextField(null=False,unique=True)
  ts           = DateTimeField(default=lambda: datetime.datetime.now())

class PhotoAlbum(BaseModel):
  photo        = ForeignKeyField(Photo, null=False, on_delete='CASCADE')
  album        = ForeignKeyField(Album, null=False, on_delete='CASCADE')
  position     = IntegerField(default=0)
  ts           = DateTimeField(default=lambda: datetime.datetime.now())

class PhotoTag(BaseModel):
  photo        = ForeignKeyField(Photo, null=False, on_delete='CASCADE')
  tag          = ForeignKeyField(Tag, null=False, on_delete='CASCADE')
  ts           = DateTimeField(default=lambda: datetime.datetime.now())

class PhotoCategory(BaseModel):
  photo        = ForeignKeyField(Photo, null=False, on_delete='CASCADE')
  category     = ForeignKeyField(Category, null=False, on_delete='CASCADE')
  ts           = DateTimeField(default=lambda: datetime.datetime.now())

class ShareGrant(BaseModel):
  # content_id points into the table named by content_kind, so it is not a foreign key
  token        = CharField(unique=True, null=False)
  owner        = ForeignKeyField(User, backref='share_grants', on_delete='CASCADE')
  recipient    = ForeignKeyField(User, null=True, backref='received_grants', on_delete='CASCADE')
  content_kind = CharField(null=False, constraints=[
                   Check("content_kind IN ('photo', 'album', 'tag', 'category')")])
  content_id   = IntegerField(null=False)
  expires_at   = DateTimeField(null=True)
  is_public    = BooleanField(default=False)
  created_at   = DateTimeField(default=lambda: datetime.datetime.now())

  class Meta:
    indexes = (
      (('owner', 'content_kind', 'content_id'), False),
    )


MODELS = [Role, User, UserRoles, Photo, Album, Tag, Category,
          PhotoAlbum, PhotoTag, PhotoCategory, ShareGrant]

def create_tables(database=None):
  """Create every table that does not exist yet"""
  (database or db).create_tables(MODELS, safe=True)
