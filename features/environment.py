"""
Behave environment configuration for DDNS Updater feature tests.
"""

import logging
import shutil
import tempfile
from pathlib import Path

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)

TEST_SECRET = "c2VjcmV0LXNlY3JldC1zZWNyZXQ="


def before_all(context):
    """Set up test environment before all tests."""
    context.test_data_dir = Path(tempfile.mkdtemp(prefix="ddns-features-"))

    context.key_file = context.test_data_dir / "update-key.key"
    with open(context.key_file, "w") as f:
        f.write(
            'key "update-key" {\n'
            "\talgorithm hmac-sha256;\n"
            f'\tsecret "{TEST_SECRET}";\n'
            "};\n"
        )

    logger.info("Test environment setup complete")


def before_scenario(context, scenario):
    """Set up each test scenario."""
    context.patchers = []
    context.transaction = None
    context.build_error = None
    context.result = None
    logger.info(f"Starting scenario: {scenario.name}")


def after_scenario(context, scenario):
    """Stop any network patches started by the scenario."""
    for patcher in context.patchers:
        patcher.stop()
    logger.info(f"Completed scenario: {scenario.name}")


def after_all(context):
    """Clean up test environment after all tests."""
    shutil.rmtree(context.test_data_dir, ignore_errors=True)
    logger.info("Test environment cleanup complete")
