"""Test fixtures shared by the unit tests.

This module provides:
- ADF node builders and sample documents
- An in-memory Confluence implementing the APIWrapper surface
- Sample markdown content and Settings
"""

from .adf_fixtures import (
    create_adf_doc,
    create_bullet_list,
    create_code_block,
    create_heading,
    create_link_paragraph,
    create_local_image,
    create_paragraph,
    create_text,
    DOC_WITH_TITLE_HEADING,
    SIMPLE_DOC,
)
from .fake_confluence import FakeConfluence, MY_ACCOUNT_ID, OTHER_ACCOUNT_ID
from .sample_markdown import (
    SAMPLE_MARKDOWN_SIMPLE,
    SAMPLE_MARKDOWN_WITH_TABLES,
    SAMPLE_MARKDOWN_WITH_CODE_BLOCKS,
    SAMPLE_MARKDOWN_WITH_IMAGES,
    markdown_file,
)
from .sample_settings import BASE_URL, make_settings

__all__ = [
    "create_adf_doc",
    "create_bullet_list",
    "create_code_block",
    "create_heading",
    "create_link_paragraph",
    "create_local_image",
    "create_paragraph",
    "create_text",
    "DOC_WITH_TITLE_HEADING",
    "SIMPLE_DOC",
    "FakeConfluence",
    "MY_ACCOUNT_ID",
    "OTHER_ACCOUNT_ID",
    "SAMPLE_MARKDOWN_SIMPLE",
    "SAMPLE_MARKDOWN_WITH_TABLES",
    "SAMPLE_MARKDOWN_WITH_CODE_BLOCKS",
    "SAMPLE_MARKDOWN_WITH_IMAGES",
    "markdown_file",
    "BASE_URL",
    "make_settings",
]
