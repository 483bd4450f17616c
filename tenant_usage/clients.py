"""
Client and credential bootstrap for the audit.

Loads the .env file, resolves database credentials, and creates the boto3 S3
client and psycopg2 connection used for a run.
"""

import getpass
import logging
import os
from pathlib import Path
from typing import Callable, Optional

import boto3
import psycopg2
from dotenv import load_dotenv

from .errors import DataAccessError

DB_CONNECT_TIMEOUT_SECONDS = 15

CredentialsProvider = Callable[[], tuple[str, str]]


def _resolve_env_path(env_path: Optional[str] = None) -> str:
    """
    Determine which .env file should be loaded.

    Priority order:
      1. Explicit parameter
      2. TENANT_USAGE_ENV_FILE environment variable
      3. ~/.env
    """
    if env_path:
        return env_path
    env_file = os.environ.get("TENANT_USAGE_ENV_FILE")
    if env_file:
        return env_file
    return str(Path.home() / ".env")


def load_env_file(env_path: Optional[str] = None) -> str:
    """Load variables from the resolved .env file without overriding the environment."""
    resolved_path = _resolve_env_path(env_path)
    if load_dotenv(resolved_path):
        logging.debug("Loaded environment from %s", resolved_path)
    return resolved_path


def load_db_credentials_from_env() -> tuple[str, str]:
    """
    Read DB_USER / DB_PASSWORD from the environment.

    Raises:
        ValueError: If either variable is missing
    """
    db_user = os.getenv("DB_USER")
    db_password = os.getenv("DB_PASSWORD")
    if db_user and db_password:
        logging.info("✅ Database credentials loaded from environment")
        return db_user, db_password
    raise ValueError("DB_USER and DB_PASSWORD are not set")


def prompt_db_credentials() -> tuple[str, str]:
    """Ask for the database user and password on the terminal."""
    db_user = input("Database user    : ").strip()
    db_password = getpass.getpass("Database password: ").strip()
    return db_user, db_password


def resolve_db_credentials(prompt: CredentialsProvider = prompt_db_credentials) -> tuple[str, str]:
    """Use credentials from the environment, falling back to prompt."""
    try:
        return load_db_credentials_from_env()
    except ValueError:
        logging.debug("No database credentials in environment, prompting")
    return prompt()


def load_aws_credentials_from_env() -> tuple[str, str]:
    """
    Read AWS_ACCESS_KEY_ID / AWS_SECRET_ACCESS_KEY from the environment.

    Raises:
        ValueError: If either variable is missing
    """
    aws_access_key_id = os.getenv("AWS_ACCESS_KEY_ID")
    aws_secret_access_key = os.getenv("AWS_SECRET_ACCESS_KEY")
    if aws_access_key_id and aws_secret_access_key:
        logging.info("✅ AWS credentials loaded from environment")
        if os.getenv("AWS_SESSION_TOKEN"):
            logging.info("✅ AWS session token loaded from environment")
        return aws_access_key_id, aws_secret_access_key
    raise ValueError("AWS_ACCESS_KEY_ID and AWS_SECRET_ACCESS_KEY are not set")


def resolve_aws_credentials() -> tuple[Optional[str], Optional[str]]:
    """Keys from the environment, or (None, None) to use boto3's default chain."""
    try:
        return load_aws_credentials_from_env()
    except ValueError:
        logging.debug("No AWS keys in environment, using boto3 default credential chain")
    return None, None


def create_s3_client(
    region: str,
    aws_access_key_id: Optional[str] = None,
    aws_secret_access_key: Optional[str] = None,
):
    """
    Create an S3 boto3 client.

    Keys come from resolve_aws_credentials(); without them boto3's default
    chain is used (~/.aws/credentials, instance role).
    """
    client_kwargs = {"region_name": region}
    if aws_access_key_id and aws_secret_access_key:
        client_kwargs["aws_access_key_id"] = aws_access_key_id
        client_kwargs["aws_secret_access_key"] = aws_secret_access_key
        session_token = os.getenv("AWS_SESSION_TOKEN")
        if session_token:
            client_kwargs["aws_session_token"] = session_token
    return boto3.client("s3", **client_kwargs)


def connect_database(host: str, port: int, database: str, user: str, password: str):
    """
    Open the psycopg2 connection shared by tenant reads and result writes.

    Raises:
        DataAccessError: If the connection cannot be established
    """
    try:
        conn = psycopg2.connect(
            host=host,
            port=port,
            database=database,
            user=user,
            password=password,
            connect_timeout=DB_CONNECT_TIMEOUT_SECONDS,
        )
    except psycopg2.Error as exc:
        logging.error("Could not connect to database %s on %s:%s: %s", database, host, port, exc)
        raise DataAccessError(f"Database connection failed: {exc}") from exc
    logging.info("✅ Connected to database %s on %s:%s", database, host, port)
    return conn
