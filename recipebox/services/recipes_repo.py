# recipebox/services/recipes_repo.py
from __future__ import annotations

import json
import sqlite3
import uuid
from datetime import datetime, timezone
from typing import Iterable, List, Optional

from recipebox.core import config
from recipebox.models.recipe import RecipeDraft, StoredRecipe

SCHEMA = """
CREATE TABLE IF NOT EXISTS recipes (
    id TEXT PRIMARY KEY,
    title TEXT NOT NULL,
    description TEXT,
    servings INTEGER NOT NULL DEFAULT 4,
    notes TEXT,
    image_urls TEXT NOT NULL DEFAULT '[]',
    source_url TEXT,
    created_at TEXT NOT NULL,
    updated_at TEXT NOT NULL
);
CREATE INDEX IF NOT EXISTS recipes_created_at_idx ON recipes (created_at);

CREATE TABLE IF NOT EXISTS ingredients (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    recipe_id TEXT NOT NULL REFERENCES recipes (id) ON DELETE CASCADE,
    position INTEGER NOT NULL,
    name TEXT NOT NULL,
    quantity TEXT NOT NULL DEFAULT ''
);
CREATE INDEX IF NOT EXISTS ingredients_recipe_id_idx ON ingredients (recipe_id);

CREATE TABLE IF NOT EXISTS instructions (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    recipe_id TEXT NOT NULL REFERENCES recipes (id) ON DELETE CASCADE,
    step INTEGER NOT NULL,
    text TEXT NOT NULL
);
CREATE INDEX IF NOT EXISTS instructions_recipe_id_idx ON instructions (recipe_id);
"""


def _now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


def recipes_db() -> sqlite3.Connection:
    conn = sqlite3.connect(str(config.RECIPES_DB))
    conn.row_factory = sqlite3.Row
    conn.execute("PRAGMA foreign_keys = ON")
    return conn


def init_db() -> None:
    config.RECIPES_DB.parent.mkdir(parents=True, exist_ok=True)
    with recipes_db() as conn:
        conn.executescript(SCHEMA)


def _write_children(conn: sqlite3.Connection, recipe_id: str, draft: RecipeDraft) -> None:
    conn.execute("DELETE FROM ingredients WHERE recipe_id = ?", (recipe_id,))
    conn.execute("DELETE FROM instructions WHERE recipe_id = ?", (recipe_id,))
    conn.executemany(
        "INSERT INTO ingredients (recipe_id, position, name, quantity) VALUES (?, ?, ?, ?)",
        [(recipe_id, i, ing.name, ing.quantity) for i, ing in enumerate(draft.ingredients)],
    )
    conn.executemany(
        "INSERT INTO instructions (recipe_id, step, text) VALUES (?, ?, ?)",
        [(recipe_id, i + 1, text) for i, text in enumerate(draft.instructions)],
    )


def _load(conn: sqlite3.Connection, row: sqlite3.Row) -> StoredRecipe:
    ingredients = conn.execute(
        "SELECT name, quantity FROM ingredients WHERE recipe_id = ? ORDER BY position",
        (row["id"],),
    ).fetchall()
    steps = conn.execute(
        "SELECT text FROM instructions WHERE recipe_id = ? ORDER BY step",
        (row["id"],),
    ).fetchall()

    return StoredRecipe(
        id=row["id"],
        title=row["title"],
        description=row["description"] or "",
        servings=row["servings"],
        notes=row["notes"],
        image_urls=json.loads(row["image_urls"] or "[]"),
        source_url=row["source_url"],
        ingredients=[{"name": r["name"], "quantity": r["quantity"]} for r in ingredients],
        instructions=[r["text"] for r in steps],
        created_at=row["created_at"],
        updated_at=row["updated_at"],
    )


def save_recipe(draft: RecipeDraft, notes: Optional[str] = None) -> StoredRecipe:
    """
    Persist a validated draft. Identity and timestamps are assigned here,
    never by the extraction pipeline.
    """
    recipe_id = uuid.uuid4().hex
    now = _now_iso()

    with recipes_db() as conn:
        conn.execute(
            """
            INSERT INTO recipes (id, title, description, servings, notes, image_urls, source_url, created_at, updated_at)
            VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?)
            """,
            (
                recipe_id,
                draft.title,
                draft.description,
                draft.servings,
                notes,
                json.dumps(draft.image_urls),
                draft.source_url,
                now,
                now,
            ),
        )
        _write_children(conn, recipe_id, draft)
        conn.commit()

    stored = get_recipe(recipe_id)
    assert stored is not None
    return stored


def update_recipe(recipe_id: str, draft: RecipeDraft, notes: Optional[str] = None) -> Optional[StoredRecipe]:
    with recipes_db() as conn:
        cur = conn.execute(
            """
            UPDATE recipes
            SET title = ?, description = ?, servings = ?, notes = ?, image_urls = ?, source_url = ?, updated_at = ?
            WHERE id = ?
            """,
            (
                draft.title,
                draft.description,
                draft.servings,
                notes,
                json.dumps(draft.image_urls),
                draft.source_url,
                _now_iso(),
                recipe_id,
            ),
        )
        if cur.rowcount == 0:
            return None
        _write_children(conn, recipe_id, draft)
        conn.commit()

    return get_recipe(recipe_id)


def add_image(recipe_id: str, image_url: str) -> Optional[StoredRecipe]:
    with recipes_db() as conn:
        row = conn.execute("SELECT image_urls FROM recipes WHERE id = ?", (recipe_id,)).fetchone()
        if not row:
            return None
        urls = json.loads(row["image_urls"] or "[]") + [image_url]
        conn.execute(
            "UPDATE recipes SET image_urls = ?, updated_at = ? WHERE id = ?",
            (json.dumps(urls), _now_iso(), recipe_id),
        )
        conn.commit()

    return get_recipe(recipe_id)


def list_recipes(limit: int = 50) -> List[StoredRecipe]:
    with recipes_db() as conn:
        rows = conn.execute(
            "SELECT * FROM recipes ORDER BY created_at DESC LIMIT ?",
            (int(limit),),
        ).fetchall()
        return [_load(conn, r) for r in rows]


def get_recipe(recipe_id: str) -> Optional[StoredRecipe]:
    with recipes_db() as conn:
        row = conn.execute("SELECT * FROM recipes WHERE id = ?", (recipe_id,)).fetchone()
        return _load(conn, row) if row else None


def get_recipes(recipe_ids: Iterable[str]) -> List[StoredRecipe]:
    """Recipes in the order asked for; unknown ids are skipped."""
    out: List[StoredRecipe] = []
    for rid in recipe_ids:
        r = get_recipe(rid)
        if r is not None:
            out.append(r)
    return out


def delete_recipe(recipe_id: str) -> bool:
    with recipes_db() as conn:
        cur = conn.execute("DELETE FROM recipes WHERE id = ?", (recipe_id,))
        conn.commit()
        return cur.rowcount > 0

