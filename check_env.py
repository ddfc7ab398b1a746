#!/usr/bin/env python3
"""Helper script to check and create the .env file for Supabase and gateway configuration."""

from pathlib import Path
import os
import sys

ENV_TEMPLATE = """# Supabase Configuration (Required: orders, courier config and token cache live here)
# Get these from: https://supabase.com/dashboard -> Your Project -> Settings -> API
COURIERDESK_SUPABASE_URL=https://your-project-id.supabase.co
COURIERDESK_SUPABASE_KEY=your-service-role-key-here
COURIERDESK_STORAGE_BUCKET=uploads

# API Configuration
COURIERDESK_API_PREFIX=/api
# COURIERDESK_FRONTEND_ALLOWED_ORIGINS - Leave commented to use defaults
# JSON array: ["http://localhost:5173"] or comma-separated: http://localhost:5173,http://127.0.0.1:5173

# Courier (Ninja Van). Client credentials are read from the ninjavan_config table.
COURIERDESK_COURIER_BASE_URL=https://api.ninjavan.co
COURIERDESK_COURIER_COUNTRY_CODE=my

# WhatsApp gateway (Whacenter)
COURIERDESK_WHATSAPP_BASE_URL=https://api.whacenter.com
"""


def _masked(value: str, head: int = 20) -> str:
    return value[:head] + "..." if len(value) > head else value


def main():
    project_root = Path(__file__).parent
    env_file = project_root / ".env"

    print("=" * 60)
    print("Courierdesk Environment Checker")
    print("=" * 60)
    print()

    if not env_file.exists():
        env_file.write_text(ENV_TEMPLATE, encoding="utf-8")
        print(f"Created template .env file at: {env_file}")
        print("Please edit .env and add your Supabase credentials.")
        return

    print(f"Found .env file at: {env_file}")
    print()
    for line in env_file.read_text(encoding="utf-8").splitlines():
        if line.startswith("COURIERDESK_SUPABASE_KEY=") and len(line) > 40:
            name, value = line.split("=", 1)
            print(f"{name}={_masked(value)}")
        else:
            print(line)
    print()

    for name in ("COURIERDESK_SUPABASE_URL", "COURIERDESK_SUPABASE_KEY"):
        value = os.getenv(name)
        print(f"{name} (from environment): {_masked(value) if value else 'not set'}")
    print()

    try:
        sys.path.insert(0, str(project_root / "src"))
        from courierdesk.config import settings
    except Exception as e:
        print(f"Error loading config: {e}")
        print("Make sure you're running this from the project root directory")
        return

    print(f"Courier API: {settings.courier_base_url}/{settings.courier_country_code}")
    print(f"WhatsApp gateway: {settings.whatsapp_base_url}")
    print()
    if settings.supabase_url and settings.supabase_key:
        print("SUCCESS: Supabase is configured!")
    else:
        print("ERROR: Supabase is NOT configured")
        print("1. Make sure variables start with the COURIERDESK_ prefix")
        print("2. Make sure there are no spaces around = sign")
        print("3. Restart the backend after editing .env")


if __name__ == "__main__":
    main()
