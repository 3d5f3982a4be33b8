"""
ReceiptScan Backend: Tablestore Client Management
=================================================

What:  Builds the Tablestore (OTS) client used for receipt history.
How:   One OTSClient per application, addressed by endpoint + instance and
       authenticated with the shared AccessKey pair from settings.
Who:   Called lazily by ReceiptStore on its first request.

Connection handling:
    OTSClient keeps its own HTTP connection pool; the handle carries no
    per-request state and is safe to share between concurrent requests.
"""

import logging

from tablestore import OTSClient

from receiptscan.config import Settings

logger = logging.getLogger(__name__)


def create_ots_client(settings: Settings) -> OTSClient:
    """
    What:  Creates the Tablestore client for the configured instance.
    Raises: tablestore.OTSClientError when endpoint, instance or credentials
            are malformed or empty.
    """
    endpoint = settings.tablestore_endpoint_url
    logger.info(
        "Creating Tablestore client: endpoint=%s, instance=%s, table=%s",
        endpoint,
        settings.tablestore_instance,
        settings.tablestore_table,
    )
    return OTSClient(
        endpoint,
        settings.access_key_id,
        settings.access_key_secret,
        settings.tablestore_instance,
    )
