#!/usr/bin/env python3
"""
Seed script — writes a small synthetic ranking-pipeline dataset to MongoDB.

Creates:
  • 5 users
  • 30 content records (images) with display paths and colors
  • One feed sample per user (12 items each)
  • Two ranking runs per sample (the later one is what the API shows)
  • Re-ranked layout variants for nCols 3, 4 and 5

The real producers (ranking / re-ranking jobs) write the same shapes.

Run against a local Mongo:
  python scripts/seed_data.py --mongodb-uri mongodb://localhost:27017

All sample IDs are printed so you can use them in curl commands.
"""
import argparse
import random
from datetime import datetime, timedelta, timezone

from bson import ObjectId
from pymongo import MongoClient

BASE_USERS = [
    ("alice_ai", "Alice Chen"),
    ("bob_builder", "Bob Martinez"),
    ("carol_codes", "Carol Singh"),
    ("dave_designs", "Dave Kim"),
    ("eve_engineer", "Eve Johnson"),
]

PALETTE = ["#1f2937", "#b91c1c", "#047857", "#1d4ed8", "#a16207", "#6d28d9", "#be185d"]
SOURCE_TYPES = ["following", "trending", "similar", "explore"]
WEIGHTS = {"aesthetic": 0.4, "recency": 0.25, "affinity": 0.2, "popularity": 0.15}

ITEMS_PER_SAMPLE = 12
N_COLS_VARIANTS = (3, 4, 5)


def make_images(count: int) -> list[dict]:
    images = []
    for i in range(count):
        doc_id = f"img_{i:04d}"
        images.append(
            {
                "doc_id": doc_id,
                "images_paths": [f"https://cdn.example.com/images/{doc_id}.webp"],
                "width": 768,
                "height": random.choice([768, 1024, 1344]),
                "color_representation": random.choice(PALETTE),
                "aesthetic_score": round(random.uniform(3, 9), 2),
                "created_at": datetime.now(timezone.utc),
            }
        )
    return images


def make_item(image: dict, embed_url: bool) -> dict:
    item = {
        "image_id": image["doc_id"],
        "source_type": random.choice(SOURCE_TYPES),
        "score": round(random.random(), 4),
        "is_seen": random.random() < 0.2,
        "metadata": {"aesthetic_score": image["aesthetic_score"]},
    }
    # Some producers embed the URL already; the API must not overwrite it
    if embed_url:
        item["image_url"] = image["images_paths"][0]
    return item


def main(mongodb_uri: str, db_name: str, drop: bool) -> None:
    client = MongoClient(mongodb_uri)
    db = client[db_name]

    if drop:
        for name in ("users", "images", "feed_samples", "ranked_feeds", "reranked_feeds"):
            db[name].drop()
        print(f"Dropped existing collections in '{db_name}'")

    # ── Users ─────────────────────────────────────────────────────────────
    print("Creating users...")
    user_ids: list[ObjectId] = []
    for handle, display_name in BASE_USERS:
        uid = db.users.insert_one(
            {
                "handle": handle,
                "profile": {
                    "display_name": display_name,
                    "avatar_url": f"https://cdn.example.com/avatars/{handle}.png",
                    "bio": "",
                },
                "created_at": datetime.now(timezone.utc),
            }
        ).inserted_id
        user_ids.append(uid)
        print(f"  ✓ {handle} ({uid})")

    # ── Images ────────────────────────────────────────────────────────────
    images = make_images(30)
    db.images.insert_many(images)
    print(f"\n  ✓ {len(images)} images created")

    # ── Pipeline stages ───────────────────────────────────────────────────
    print("\nCreating samples, ranking runs and layout variants...")
    sample_ids: list[ObjectId] = []
    now = datetime.now(timezone.utc)
    for uid in user_ids:
        picked = random.sample(images, k=ITEMS_PER_SAMPLE)
        items = [make_item(img, embed_url=random.random() < 0.3) for img in picked]

        sample_id = db.feed_samples.insert_one(
            {
                "user_id": str(uid),
                "feed_items": items,
                "item_count": len(items),
                "updated_at": now,
            }
        ).inserted_id
        sample_ids.append(sample_id)

        ranked_id = None
        for run in range(2):
            ranked_items = sorted(items, key=lambda it: it["score"], reverse=(run == 1))
            ranked_id = db.ranked_feeds.insert_one(
                {
                    "user_id": str(uid),
                    "feed_sample_id": sample_id,
                    "feed_items": ranked_items,
                    "details": {
                        "total_time": round(random.uniform(0.05, 0.4), 4),
                        "scoring_time": round(random.uniform(0.01, 0.1), 4),
                        "sorting_time": round(random.uniform(0.001, 0.01), 4),
                    },
                    "variables": {"weights": WEIGHTS},
                    "created_at": now + timedelta(seconds=run),
                }
            ).inserted_id

        for n_cols in N_COLS_VARIANTS:
            sequence = [random.randrange(len(PALETTE)) for _ in range(n_cols * 2)]
            db.reranked_feeds.insert_one(
                {
                    "user_id": str(uid),
                    "feed_sample_id": sample_id,
                    "ranked_feed_id": ranked_id,
                    "nCols": n_cols,
                    "variables": {"H_MIN": 0.75, "H_MAX": 1.75, "CLUSTER_SEQUENCE": sequence},
                    "details": {"total_time": round(random.uniform(0.01, 0.2), 4)},
                    "feed_items": random.sample(items, k=len(items)),
                    "created_at": now,
                }
            )
    print(f"  ✓ {len(sample_ids)} samples, {2 * len(sample_ids)} ranking runs, "
          f"{len(N_COLS_VARIANTS) * len(sample_ids)} layout variants")

    client.close()

    # ── Print summary ─────────────────────────────────────────────────────
    print("\n" + "=" * 60)
    print("Seed complete! Here are some commands to try:\n")
    s = sample_ids[0]
    print("# List samples:")
    print("  curl -s 'http://localhost:8000/feeds' | python3 -m json.tool\n")
    print(f"# Sample / ranked / re-ranked views for '{BASE_USERS[0][0]}':")
    print(f"  curl -s 'http://localhost:8000/feeds/{s}' | python3 -m json.tool")
    print(f"  curl -s 'http://localhost:8000/feeds/{s}/ranked' | python3 -m json.tool")
    print(f"  curl -s 'http://localhost:8000/feeds/{s}/reranked?nCols=4' | python3 -m json.tool\n")
    print("# Missing variant (404 lists available nCols):")
    print(f"  curl -s 'http://localhost:8000/feeds/{s}/reranked?nCols=7' | python3 -m json.tool")
    print("=" * 60)


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="Seed the ranking pipeline collections")
    parser.add_argument("--mongodb-uri", default="mongodb://localhost:27017", help="MongoDB URI")
    parser.add_argument("--db", default="ranking-algorithm", help="Database name")
    parser.add_argument("--drop", action="store_true", help="Drop collections first")
    args = parser.parse_args()
    main(args.mongodb_uri, args.db, args.drop)
