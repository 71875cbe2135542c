#!/usr/bin/env python3
"""
Reference List Seed Script

Creates indexes and upserts the departments/domains offered during faculty
profile setup. Existing names are left untouched.

Usage: python scripts/seed_reference_lists.py [--departments A B ...] [--domains X Y ...]
"""
import argparse
import sys
sys.path.insert(0, '.')

from capstone_portal.db.mongodb import COLLECTIONS, get_collection, init_mongo_indexes


DEFAULT_DEPARTMENTS = [
    "Computer Science and Engineering",
    "Electronics and Communication Engineering",
    "Electrical and Electronics Engineering",
    "Information Technology",
    "Mechanical Engineering",
]

DEFAULT_DOMAINS = [
    "Artificial Intelligence",
    "Computer Networks",
    "Cyber Security",
    "Data Science",
    "Embedded Systems",
    "Internet of Things",
    "Web Development",
]


def seed(collection_key: str, names: list) -> int:
    collection = get_collection(COLLECTIONS[collection_key])
    inserted = 0
    for name in names:
        result = collection.update_one({"name": name}, {"$setOnInsert": {"name": name}}, upsert=True)
        if result.upserted_id is not None:
            inserted += 1
    return inserted


def main():
    parser = argparse.ArgumentParser(description="Seed reference lists")
    parser.add_argument("--departments", nargs="*", default=DEFAULT_DEPARTMENTS)
    parser.add_argument("--domains", nargs="*", default=DEFAULT_DOMAINS)
    args = parser.parse_args()

    print("\n[1] Creating indexes...")
    init_mongo_indexes()
    print("    ✅ Indexes ready")

    print("\n[2] Seeding departments...")
    print(f"    ✅ {seed('departments', args.departments)} new of {len(args.departments)}")

    print("\n[3] Seeding domains...")
    print(f"    ✅ {seed('domains', args.domains)} new of {len(args.domains)}")


if __name__ == "__main__":
    main()
