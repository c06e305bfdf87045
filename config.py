# Statement for enabling the development environment
DEBUG = True

# Define the application directory
import os
BASE_DIR = os.path.abspath(os.path.dirname(__file__))

# Define the database - we are working with
# SQLite for this example
DATABASE = {'name': os.environ.get('SHOEBOX_DATABASE', 'shoebox.db')}

# Secret key for signing cookies
SECRET_KEY = os.environ.get('SHOEBOX_SECRET_KEY', 'secret')

# Flask-Security-Too
SECURITY_PASSWORD_SALT = os.environ.get('SHOEBOX_PASSWORD_SALT', 'changeme-salt')
SECURITY_PASSWORD_HASH = 'bcrypt'
SECURITY_REGISTERABLE = False

# Enable protection agains *Cross-site Request Forgery (CSRF)*
CSRF_ENABLED     = True

# Used when a share link is built outside of a request
SITEURL = os.environ.get('SHOEBOX_SITEURL', 'http://127.0.0.1:5000')

# Share tokens: 16 random bytes = 128 bits
SHARE_TOKEN_BYTES = 16
# Fresh tokens to try when the unique index rejects one
SHARE_TOKEN_ATTEMPTS = 3

# Outbound mail for named-recipient shares
MAIL_SERVER = os.environ.get('SHOEBOX_MAIL_SERVER', '')
MAIL_PORT = int(os.environ.get('SHOEBOX_MAIL_PORT', '587'))
MAIL_USE_TLS = os.environ.get('SHOEBOX_MAIL_USE_TLS', 'true') == 'true'
MAIL_USERNAME = os.environ.get('SHOEBOX_MAIL_USERNAME', '')
MAIL_PASSWORD = os.environ.get('SHOEBOX_MAIL_PASSWORD', '')
MAIL_DEFAULT_SENDER = os.environ.get('SHOEBOX_MAIL_SENDER', 'shoebox@localhost')
# Log messages instead of talking to the SMTP server
MAIL_SUPPRESS_SEND = os.environ.get('SHOEBOX_MAIL_SUPPRESS_SEND', 'false') == 'true'

# Shared log file directory (volume mounted in docker)
LOG_DIR = os.environ.get('SHOEBOX_LOG_DIR', '/app/logs')
