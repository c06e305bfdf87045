#! /usr/bin/env python

# -*- coding: utf-8 -*-

import sys
import os
import argparse

# Add parent directory to path for imports
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from app import app
from db import db, MODELS
import util

logger = util.setup_custom_logger('shoebox', service_name='cli',
                                  log_dir=app.config.get('LOG_DIR', '/app/logs'))

def create_tables(models):
  for model in models:
    model.create_table(safe=True)
    logger.info('Created table for model %s' % model.__name__)

def main():
  """Main program"""
  parser = argparse.ArgumentParser(description='Create the Shoebox database tables')
  parser.add_argument('--drop', action='store_true',
                      help='drop existing tables first (destroys all data)')
  args = parser.parse_args()

  logger.info('Creating Tables in %s', app.config['DATABASE']['name'])
  db.connect(reuse_if_open=True)
  try:
    # drop in reverse so dependent tables go first
    if args.drop:
      for model in reversed(MODELS):
        model.drop_table(safe=True)
        logger.info('Dropped table for model %s' % model.__name__)
    create_tables(MODELS)
  finally:
    db.close()


# MAIN

if __name__ == "__main__":
  main()
