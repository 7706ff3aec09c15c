#!/usr/bin/env python3
"""
Connection Check Script

Verifies the relational store, MongoDB, DeepSeek and SMTP settings.
Usage: python scripts/check_connections.py
"""
import smtplib
import ssl

from placecell.core.config import get_settings
from placecell.db.mongodb import test_mongo_connection
from placecell.db.postgres import test_postgres_connection
from placecell.services.deepseek_client import get_deepseek_client


def check_smtp(settings) -> bool:
    try:
        if settings.smtp_port == 465:
            server = smtplib.SMTP_SSL(settings.smtp_host, settings.smtp_port,
                                      context=ssl.create_default_context(), timeout=10)
        else:
            server = smtplib.SMTP(settings.smtp_host, settings.smtp_port, timeout=10)
            server.starttls(context=ssl.create_default_context())
        with server:
            server.login(settings.smtp_user, settings.smtp_password)
        return True
    except (smtplib.SMTPException, OSError) as e:
        print(f"    {e}")
        return False


def main():
    settings = get_settings()
    print("=" * 50)
    print("PLACEMENT CELL PORTAL - CONNECTION CHECK")
    print("=" * 50)

    print("\n[1] Relational store...")
    if settings.database_url:
        print(f"    URL: {settings.database_url.split('@')[-1]}")
    else:
        print(f"    URL: postgresql://{settings.postgres_user}:****@{settings.postgres_host}:{settings.postgres_port}/{settings.postgres_db}")
    print("    ✅ CONNECTED" if test_postgres_connection() else "    ❌ FAILED")

    print("\n[2] MongoDB...")
    print(f"    URI: {settings.mongodb_uri}")
    print(f"    Database: {settings.mongodb_db}")
    print("    ✅ CONNECTED" if test_mongo_connection() else "    ❌ FAILED")

    print("\n[3] DeepSeek API...")
    if settings.deepseek_api_key:
        print(f"    Base URL: {settings.deepseek_base_url} ({settings.deepseek_model})")
        print("    ✅ CONNECTED" if get_deepseek_client().test_connection() else "    ❌ FAILED")
    else:
        print("    ⚠️  API key not configured, registration form uploads will fail")

    print("\n[4] SMTP...")
    if settings.smtp_user and settings.smtp_password:
        print(f"    Server: {settings.smtp_host}:{settings.smtp_port} as {settings.smtp_user}")
        print("    ✅ LOGGED IN" if check_smtp(settings) else "    ❌ FAILED")
    else:
        print("    ⚠️  SMTP credentials not configured, emails cannot be sent")

    print("\n" + "=" * 50)
    print("Connection check complete!")
    print("=" * 50)


if __name__ == "__main__":
    main()
