# backend/tenancy/cli/__main__.py
from __future__ import annotations

import argparse

from tenancy.cli.seed_demo import seed_demo


def main() -> None:
    p = argparse.ArgumentParser(prog="python -m tenancy.cli")
    p.add_argument("--org-slug", default="demo")
    p.add_argument("--org-name", default="demo")
    p.add_argument("--user-email", default="owner@demo.local")
    p.add_argument("--user-name", default="Owner")
    p.add_argument("--create-tables", action="store_true", help="create_all before seeding (sqlite dev only)")
    p.add_argument("--no-sample-tenancy", action="store_true")
    args = p.parse_args()

    out = seed_demo(
        org_slug=args.org_slug,
        org_name=args.org_name,
        user_email=args.user_email,
        user_name=args.user_name,
        create_tables=args.create_tables,
        create_sample_tenancy=(not args.no_sample_tenancy),
    )
    print(
        {
            "ok": True,
            "org_slug": out.org_slug,
            "user_email": out.user_email,
            "property_id": out.property_id,
            "unit_id": out.unit_id,
            "lease_id": out.lease_id,
        }
    )


if __name__ == "__main__":
    main()
