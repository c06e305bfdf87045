#! /usr/bin/env python

"""utility methods"""

import os.path, logging, datetime

# set up logging
logger = logging.getLogger('shoebox')


def setup_custom_logger(name, service_name='app', log_dir='/app/logs'):
  """Setup logger that writes to both console and shared file

  Args:
    name: Logger name (usually 'shoebox')
    service_name: Service identifier ('web' or 'cli') to distinguish containers
    log_dir: Directory of the shared log file
  """
  # Format: timestamp [SERVICE] LEVEL - module - message
  formatter = logging.Formatter(
    fmt=f'%(asctime)s [{service_name.upper()}] %(levelname)s - %(module)s - %(message)s',
    datefmt='%Y-%m-%d %H:%M:%S'
  )

  logger = logging.getLogger(name)
  logger.setLevel(logging.INFO)

  # Avoid duplicate handlers if called multiple times
  if logger.handlers:
    return logger

  # Console handler (for docker logs command)
  console_handler = logging.StreamHandler()
  console_handler.setFormatter(formatter)
  logger.addHandler(console_handler)

  # File handler (shared log file - volume mounted)
  try:
    os.makedirs(log_dir, exist_ok=True)
    file_handler = logging.FileHandler(os.path.join(log_dir, 'shoebox.log'))
    file_handler.setFormatter(formatter)
    logger.addHandler(file_handler)
  except Exception as e:
    logger.warning(f'Could not setup file logging: {e}')

  return logger


def parse_datetime(value):
  """Parse an ISO-8601 string into a naive local datetime

  Aware values are converted to local time first so they compare with
  datetime.datetime.now(). Returns None for empty values, raises ValueError
  for anything unparseable.
  """
  if value is None or value == '':
    return None
  if isinstance(value, datetime.datetime):
    dt = value
  else:
    text = str(value).strip()
    # fromisoformat() only learned the Z suffix in 3.11
    if text.endswith('Z'):
      text = text[:-1] + '+00:00'
    dt = datetime.datetime.fromisoformat(text)
  if dt.tzinfo is not None:
    dt = dt.astimezone().replace(tzinfo=None)
  return dt


def format_datetime(value, format=None):
  """Format a datetime for JSON output (ISO-8601 unless format is given)"""
  if not value:
    return None
  if format is None:
    return value.isoformat(timespec='seconds')
  return value.strftime(format)
