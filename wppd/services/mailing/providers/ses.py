"""AWS SES mail provider."""

import asyncio
import logging

import boto3
from botocore.exceptions import BotoCoreError, ClientError

logger = logging.getLogger(__name__)


class SesMailProvider:
    """Send mail through the SES v2 API."""

    def __init__(self, region: str, access_key_id: str, secret_access_key: str):
        self.client = boto3.client(
            "sesv2",
            region_name=region,
            aws_access_key_id=access_key_id,
            aws_secret_access_key=secret_access_key,
        )

    async def send(self, sender: str, recipient: str, subject: str, html: str) -> bool:
        try:
            response = await asyncio.to_thread(
                self.client.send_email,
                FromEmailAddress=sender,
                Destination={"ToAddresses": [recipient]},
                Content={
                    "Simple": {
                        "Subject": {"Data": subject, "Charset": "UTF-8"},
                        "Body": {"Html": {"Data": html, "Charset": "UTF-8"}},
                    }
                },
            )
        except (BotoCoreError, ClientError) as e:
            logger.error(f"SES rejected mail to {recipient}: {e}")
            return False

        logger.info(f"SES accepted mail {response.get('MessageId')} to {recipient}")
        return True
