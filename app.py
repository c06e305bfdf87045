#!/usr/bin/env python
# -*- coding:utf-8 -*-

import logging
import sys
from flask import Flask, jsonify
from werkzeug.exceptions import HTTPException

# create the app
app = Flask(__name__)

# Load default config and override config from config file
app.config.from_object('config')

# Configure logging for better error visibility
if not app.debug:
    # Set up logging to stderr (captured by Docker/gunicorn)
    handler = logging.StreamHandler(sys.stderr)
    handler.setLevel(logging.ERROR)
    formatter = logging.Formatter(
        '[%(asctime)s] %(levelname)s in %(module)s: %(message)s'
    )
    handler.setFormatter(formatter)
    app.logger.addHandler(handler)
    app.logger.setLevel(logging.ERROR)

# Log all unhandled exceptions
@app.errorhandler(Exception)
def handle_exception(e):
    # HTTP errors keep their status, rendered as JSON like every other error
    if isinstance(e, HTTPException):
        if e.code is None:
            return e
        return jsonify({'error': e.name.replace(' ', ''), 'message': e.description}), e.code
    # Log the error
    app.logger.error(f'Unhandled exception: {str(e)}', exc_info=True)
    return jsonify({'error': 'InternalError', 'message': 'Internal Server Error'}), 500
