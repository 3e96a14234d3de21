"""otpauth:// provisioning URIs for otpkit credentials."""

import logging

logging.getLogger(__name__).addHandler(logging.NullHandler())
