"""Root pytest configuration."""

import logging

# atlassian-python-api logs missing pages at ERROR level; lookups of pages
# that do not exist yet are normal during publish tests.
logging.getLogger("atlassian").setLevel(logging.WARNING)
