"""
AI Trends Database Module

SQLite database schema and operations for the catalog and automation pipeline.
"""

import sqlite3
from pathlib import Path
from typing import Any, Optional
import json


SCHEMA = """
-- Users: authentication and authorization
CREATE TABLE IF NOT EXISTS users (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    username TEXT UNIQUE NOT NULL,
    email TEXT UNIQUE NOT NULL,
    password_hash TEXT NOT NULL,
    is_active INTEGER DEFAULT 1,
    is_admin INTEGER DEFAULT 0,
    created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP,
    last_login TIMESTAMP
);

-- Categories: created lazily by discovery or seeded manually
CREATE TABLE IF NOT EXISTS categories (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    name TEXT NOT NULL UNIQUE,
    slug TEXT NOT NULL UNIQUE,
    icon TEXT NOT NULL,                    -- icon name, see CATEGORY_ICONS
    description TEXT,
    created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
);

-- Tools: the catalog
CREATE TABLE IF NOT EXISTS tools (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    name TEXT NOT NULL,
    slug TEXT NOT NULL UNIQUE,
    tagline TEXT NOT NULL,
    description TEXT,
    logo TEXT NOT NULL,
    category_id INTEGER NOT NULL,
    upvotes INTEGER NOT NULL DEFAULT 0,
    views INTEGER NOT NULL DEFAULT 0,
    views_week INTEGER NOT NULL DEFAULT 0,
    views_today INTEGER NOT NULL DEFAULT 0,
    trend_percentage INTEGER NOT NULL DEFAULT 0,
    website TEXT,
    twitter TEXT,
    github TEXT,
    status TEXT NOT NULL DEFAULT 'pending', -- pending, approved, rejected
    screenshots TEXT,                      -- JSON: list of image URLs
    pricing TEXT,                          -- JSON: {model, plans: [{name, price, features}]}
    submitted_by INTEGER,
    created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP,
    updated_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP,
    FOREIGN KEY (category_id) REFERENCES categories(id),
    FOREIGN KEY (submitted_by) REFERENCES users(id)
);

CREATE TABLE IF NOT EXISTS tool_features (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    tool_id INTEGER NOT NULL,
    feature TEXT NOT NULL,
    position INTEGER DEFAULT 0,
    FOREIGN KEY (tool_id) REFERENCES tools(id) ON DELETE CASCADE
);

CREATE TABLE IF NOT EXISTS tool_tags (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    tool_id INTEGER NOT NULL,
    tag TEXT NOT NULL,
    UNIQUE(tool_id, tag),
    FOREIGN KEY (tool_id) REFERENCES tools(id) ON DELETE CASCADE
);

CREATE TABLE IF NOT EXISTS similar_tools (
    tool_id INTEGER NOT NULL,
    similar_tool_id INTEGER NOT NULL,
    PRIMARY KEY (tool_id, similar_tool_id),
    FOREIGN KEY (tool_id) REFERENCES tools(id) ON DELETE CASCADE,
    FOREIGN KEY (similar_tool_id) REFERENCES tools(id) ON DELETE CASCADE
);

CREATE TABLE IF NOT EXISTS sponsors (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    name TEXT NOT NULL,
    logo TEXT NOT NULL,
    description TEXT NOT NULL,
    url TEXT NOT NULL,
    tier TEXT NOT NULL,                    -- premium, standard
    start_date TIMESTAMP DEFAULT CURRENT_TIMESTAMP,
    end_date TIMESTAMP,
    created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
);

CREATE TABLE IF NOT EXISTS upvotes (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    tool_id INTEGER NOT NULL,
    user_id INTEGER,
    ip_address TEXT,                       -- anonymous upvotes
    created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP,
    FOREIGN KEY (tool_id) REFERENCES tools(id) ON DELETE CASCADE,
    FOREIGN KEY (user_id) REFERENCES users(id) ON DELETE CASCADE
);

-- Analytics: raw event log (views, clicks, upvotes)
CREATE TABLE IF NOT EXISTS analytics (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    tool_id INTEGER NOT NULL,
    event_type TEXT NOT NULL,              -- view, click, upvote
    ip_address TEXT,
    user_agent TEXT,
    referrer TEXT,
    created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP,
    FOREIGN KEY (tool_id) REFERENCES tools(id) ON DELETE CASCADE
);

-- Submissions: user-submitted tools awaiting review
CREATE TABLE IF NOT EXISTS submissions (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    name TEXT NOT NULL,
    tagline TEXT NOT NULL,
    description TEXT,
    logo TEXT NOT NULL,
    category_id INTEGER NOT NULL,
    website TEXT,
    twitter TEXT,
    github TEXT,
    screenshots TEXT,
    pricing TEXT,
    submitter_email TEXT NOT NULL,
    submitter_name TEXT,
    status TEXT NOT NULL DEFAULT 'pending',
    reviewed_by INTEGER,
    reviewed_at TIMESTAMP,
    created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP,
    FOREIGN KEY (category_id) REFERENCES categories(id),
    FOREIGN KEY (reviewed_by) REFERENCES users(id)
);

-- Discovered tools: URLs found by search, queued for scrape/classify
CREATE TABLE IF NOT EXISTS discovered_tools (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    url TEXT NOT NULL UNIQUE,
    source TEXT NOT NULL,
    status TEXT NOT NULL DEFAULT 'discovered', -- discovered, processing, processed, failed
    raw_data TEXT,                         -- JSON: scraped data
    processed_tool_id INTEGER,
    error_message TEXT,
    discovered_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP,
    processed_at TIMESTAMP,
    FOREIGN KEY (processed_tool_id) REFERENCES tools(id) ON DELETE SET NULL
);

-- Tool metrics: append-only daily snapshots
CREATE TABLE IF NOT EXISTS tool_metrics (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    tool_id INTEGER NOT NULL,
    date DATE NOT NULL,
    daily_views INTEGER DEFAULT 0,
    weekly_views INTEGER DEFAULT 0,
    monthly_views INTEGER DEFAULT 0,
    github_stars INTEGER DEFAULT 0,
    traffic_score INTEGER DEFAULT 0,
    trend_score INTEGER DEFAULT 50,
    popularity_score INTEGER DEFAULT 0,
    serp_position INTEGER,
    social_mentions INTEGER DEFAULT 0,
    created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP,
    FOREIGN KEY (tool_id) REFERENCES tools(id) ON DELETE CASCADE
);

-- Automation logs: one row per pipeline run
CREATE TABLE IF NOT EXISTS automation_logs (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    type TEXT NOT NULL,                    -- discovery, metrics-update, tool-refresh
    status TEXT NOT NULL,                  -- running, success, failed, partial
    metadata TEXT,                         -- JSON: counts, duration, errors
    started_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP,
    completed_at TIMESTAMP
);

-- Indexes for common queries
CREATE INDEX IF NOT EXISTS idx_tools_status ON tools(status);
CREATE INDEX IF NOT EXISTS idx_tools_category ON tools(category_id);
CREATE INDEX IF NOT EXISTS idx_analytics_tool ON analytics(tool_id, event_type, created_at);
CREATE INDEX IF NOT EXISTS idx_discovered_status ON discovered_tools(status);
CREATE INDEX IF NOT EXISTS idx_metrics_tool ON tool_metrics(tool_id, id);
CREATE INDEX IF NOT EXISTS idx_automation_started ON automation_logs(started_at);
CREATE INDEX IF NOT EXISTS idx_submissions_status ON submissions(status);
"""

JSON_COLUMNS = ("screenshots", "pricing", "raw_data", "metadata")

TOOL_STATUSES = ("pending", "approved", "rejected")
DISCOVERY_STATUSES = ("discovered", "processing", "processed", "failed")

TOOL_FIELDS = (
    "name", "slug", "tagline", "description", "logo", "category_id",
    "upvotes", "views", "views_week", "views_today", "trend_percentage",
    "website", "twitter", "github", "status", "screenshots", "pricing",
    "submitted_by",
)

TOOL_SORTS = {
    "upvotes": "upvotes DESC",
    "trend": "trend_percentage DESC",
    "newest": "created_at DESC, id DESC",
    "name": "name ASC",
}


def _encode(value: Any) -> Any:
    if isinstance(value, (dict, list)):
        return json.dumps(value)
    return value


def _row_to_dict(row: Optional[sqlite3.Row]) -> Optional[dict]:
    """Convert a row to a dict, decoding JSON columns."""
    if row is None:
        return None
    data = dict(row)
    for column in JSON_COLUMNS:
        value = data.get(column)
        if isinstance(value, str):
            try:
                data[column] = json.loads(value)
            except json.JSONDecodeError:
                pass
    return data


class Database:
    """SQLite database wrapper for AI Trends."""

    enabled = True

    def __init__(self, db_path: str = "db/aitrends.db", check_same_thread: bool = True):
        self.db_path = Path(db_path)
        self.db_path.parent.mkdir(parents=True, exist_ok=True)
        self.check_same_thread = check_same_thread
        self.conn: Optional[sqlite3.Connection] = None

    def connect(self) -> sqlite3.Connection:
        """Connect to the database."""
        if self.conn is None:
            self.conn = sqlite3.connect(self.db_path, check_same_thread=self.check_same_thread)
            self.conn.row_factory = sqlite3.Row
            self.conn.execute("PRAGMA foreign_keys = ON")
        return self.conn

    def close(self):
        """Close the database connection."""
        if self.conn:
            self.conn.close()
            self.conn = None

    def init_schema(self):
        """Initialize the database schema."""
        conn = self.connect()
        conn.executescript(SCHEMA)
        conn.commit()

    def _fetch_one(self, query: str, params: tuple | list = ()) -> Optional[dict]:
        return _row_to_dict(self.connect().execute(query, params).fetchone())

    def _fetch_all(self, query: str, params: tuple | list = ()) -> list[dict]:
        rows = self.connect().execute(query, params).fetchall()
        return [_row_to_dict(row) for row in rows]

    # --- Category Operations ---

    def add_category(self, name: str, slug: str, icon: str = "Box",
                     description: str = None) -> int:
        """Add a new category."""
        conn = self.connect()
        cursor = conn.execute(
            """INSERT INTO categories (name, slug, icon, description)
               VALUES (?, ?, ?, ?)
               RETURNING id""",
            (name, slug, icon, description)
        )
        category_id = cursor.fetchone()[0]
        conn.commit()
        return category_id

    def get_category(self, category_id: int) -> Optional[dict]:
        """Get a category by ID."""
        return self._fetch_one("SELECT * FROM categories WHERE id = ?", (category_id,))

    def get_category_by_name(self, name: str) -> Optional[dict]:
        """Get a category by its unique name."""
        return self._fetch_one("SELECT * FROM categories WHERE name = ?", (name,))

    def get_category_by_slug(self, slug: str) -> Optional[dict]:
        """Get a category by its unique slug."""
        return self._fetch_one("SELECT * FROM categories WHERE slug = ?", (slug,))

    def list_categories(self) -> list[dict]:
        """List categories with their approved tool count."""
        return self._fetch_all(
            """SELECT c.*, COUNT(t.id) AS tool_count
               FROM categories c
               LEFT JOIN tools t ON t.category_id = c.id AND t.status = 'approved'
               GROUP BY c.id
               ORDER BY c.name"""
        )

    def count_tools_in_category(self, category_id: int) -> int:
        """Number of tools (any status) in a category."""
        return self.connect().execute(
            "SELECT COUNT(*) FROM tools WHERE category_id = ?", (category_id,)
        ).fetchone()[0]

    def update_category(self, category_id: int, fields: dict) -> Optional[dict]:
        """Update category columns; returns the updated row."""
        allowed = {k: v for k, v in fields.items()
                   if k in ("name", "slug", "icon", "description")}
        if allowed:
            assignments = ", ".join(f"{column} = ?" for column in allowed)
            conn = self.connect()
            conn.execute(
                f"UPDATE categories SET {assignments} WHERE id = ?",
                (*allowed.values(), category_id)
            )
            conn.commit()
        return self.get_category(category_id)

    def delete_category(self, category_id: int) -> bool:
        """Delete a category. Returns False if it did not exist."""
        conn = self.connect()
        cursor = conn.execute("DELETE FROM categories WHERE id = ?", (category_id,))
        conn.commit()
        return cursor.rowcount > 0

    # --- Tool Operations ---

    def add_tool(self, name: str, slug: str, tagline: str, logo: str,
                 category_id: int, status: str = "pending", **fields) -> int:
        """Add a new tool to the catalog. Raises sqlite3.IntegrityError on slug collision."""
        values = {
            "name": name,
            "slug": slug,
            "tagline": tagline,
            "logo": logo,
            "category_id": category_id,
            "status": status,
        }
        values.update({k: v for k, v in fields.items() if k in TOOL_FIELDS})

        columns = ", ".join(values)
        placeholders = ", ".join("?" * len(values))
        conn = self.connect()
        cursor = conn.execute(
            f"INSERT INTO tools ({columns}) VALUES ({placeholders}) RETURNING id",
            [_encode(v) for v in values.values()]
        )
        tool_id = cursor.fetchone()[0]
        conn.commit()
        return tool_id

    def get_tool(self, tool_id: int) -> Optional[dict]:
        """Get a tool by ID."""
        return self._fetch_one("SELECT * FROM tools WHERE id = ?", (tool_id,))

    def get_tool_by_slug(self, slug: str, status: str = None) -> Optional[dict]:
        """Get a tool by slug, optionally requiring a status."""
        if status:
            return self._fetch_one(
                "SELECT * FROM tools WHERE slug = ? AND status = ?", (slug, status)
            )
        return self._fetch_one("SELECT * FROM tools WHERE slug = ?", (slug,))

    def get_tools_by_status(self, status: str) -> list[dict]:
        """Get all tools with a given status."""
        return self._fetch_all(
            "SELECT * FROM tools WHERE status = ? ORDER BY id", (status,)
        )

    def list_tools(self, status: Optional[str] = "approved", sort: str = "upvotes",
                   limit: Optional[int] = None, category_id: Optional[int] = None) -> list[dict]:
        """List tools filtered by status/category with a named sort order."""
        query = "SELECT * FROM tools WHERE 1=1"
        params: list = []

        if status:
            query += " AND status = ?"
            params.append(status)
        if category_id is not None:
            query += " AND category_id = ?"
            params.append(category_id)

        query += f" ORDER BY {TOOL_SORTS.get(sort, TOOL_SORTS['upvotes'])}"

        if limit:
            query += " LIMIT ?"
            params.append(limit)

        return self._fetch_all(query, params)

    def search_tools(self, text: Optional[str] = None,
                     category_id: Optional[int] = None) -> list[dict]:
        """Search approved tools by name, tagline or description."""
        query = "SELECT * FROM tools WHERE status = 'approved'"
        params: list = []

        if category_id is not None:
            query += " AND category_id = ?"
            params.append(category_id)

        if text:
            term = f"%{text}%"
            query += " AND (name LIKE ? OR tagline LIKE ? OR description LIKE ?)"
            params.extend([term, term, term])

        query += " ORDER BY upvotes DESC"
        return self._fetch_all(query, params)

    def update_tool(self, tool_id: int, fields: dict) -> Optional[dict]:
        """Update tool columns and updated_at; returns the updated row."""
        allowed = {k: v for k, v in fields.items() if k in TOOL_FIELDS}
        assignments = [f"{column} = ?" for column in allowed]
        assignments.append("updated_at = CURRENT_TIMESTAMP")

        conn = self.connect()
        conn.execute(
            f"UPDATE tools SET {', '.join(assignments)} WHERE id = ?",
            [*(_encode(v) for v in allowed.values()), tool_id]
        )
        conn.commit()
        return self.get_tool(tool_id)

    def update_tool_metrics_fields(self, tool_id: int, trend_percentage: int,
                                   views_today: int, views_week: int):
        """Copy the latest derived metrics onto the tool row (updated_at untouched)."""
        conn = self.connect()
        conn.execute(
            """UPDATE tools SET trend_percentage = ?, views_today = ?, views_week = ?
               WHERE id = ?""",
            (trend_percentage, views_today, views_week, tool_id)
        )
        conn.commit()

    def delete_tool(self, tool_id: int) -> bool:
        """Delete a tool and its dependent rows."""
        conn = self.connect()
        conn.execute(
            "UPDATE discovered_tools SET processed_tool_id = NULL WHERE processed_tool_id = ?",
            (tool_id,)
        )
        cursor = conn.execute("DELETE FROM tools WHERE id = ?", (tool_id,))
        conn.commit()
        return cursor.rowcount > 0

    def get_tools_for_refresh(self, limit: int = 10,
                              stale_days: Optional[int] = None) -> list[dict]:
        """Approved tools, least recently updated first."""
        query = "SELECT * FROM tools WHERE status = 'approved'"
        params: list = []
        if stale_days:
            query += " AND updated_at <= datetime('now', ?)"
            params.append(f"-{int(stale_days)} days")
        query += " ORDER BY updated_at ASC, id ASC LIMIT ?"
        params.append(limit)
        return self._fetch_all(query, params)

    def set_tool_features(self, tool_id: int, features: list[str]):
        """Replace the stored feature list for a tool."""
        conn = self.connect()
        conn.execute("DELETE FROM tool_features WHERE tool_id = ?", (tool_id,))
        conn.executemany(
            "INSERT INTO tool_features (tool_id, feature, position) VALUES (?, ?, ?)",
            [(tool_id, feature, i) for i, feature in enumerate(features)]
        )
        conn.commit()

    def get_tool_features(self, tool_id: int) -> list[str]:
        """Get a tool's features in order."""
        rows = self.connect().execute(
            "SELECT feature FROM tool_features WHERE tool_id = ? ORDER BY position",
            (tool_id,)
        ).fetchall()
        return [row["feature"] for row in rows]

    def set_tool_tags(self, tool_id: int, tags: list[str]):
        """Replace the stored tags for a tool."""
        conn = self.connect()
        conn.execute("DELETE FROM tool_tags WHERE tool_id = ?", (tool_id,))
        conn.executemany(
            "INSERT OR IGNORE INTO tool_tags (tool_id, tag) VALUES (?, ?)",
            [(tool_id, tag) for tag in tags]
        )
        conn.commit()

    def get_tool_tags(self, tool_id: int) -> list[str]:
        """Get a tool's tags."""
        rows = self.connect().execute(
            "SELECT tag FROM tool_tags WHERE tool_id = ? ORDER BY id", (tool_id,)
        ).fetchall()
        return [row["tag"] for row in rows]

    def link_similar_tools(self, tool_id: int, category_id: int, limit: int = 5) -> int:
        """Link a tool to the most upvoted approved tools in its category."""
        conn = self.connect()
        rows = conn.execute(
            """SELECT id FROM tools
               WHERE category_id = ? AND status = 'approved' AND id != ?
               ORDER BY upvotes DESC, id ASC LIMIT ?""",
            (category_id, tool_id, limit)
        ).fetchall()
        conn.executemany(
            "INSERT OR IGNORE INTO similar_tools (tool_id, similar_tool_id) VALUES (?, ?)",
            [(tool_id, row["id"]) for row in rows]
        )
        conn.commit()
        return len(rows)

    def get_similar_tools(self, tool_id: int) -> list[dict]:
        """Get approved tools linked as similar."""
        return self._fetch_all(
            """SELECT t.* FROM similar_tools s
               JOIN tools t ON t.id = s.similar_tool_id
               WHERE s.tool_id = ? AND t.status = 'approved'
               ORDER BY t.upvotes DESC""",
            (tool_id,)
        )

    # --- Engagement Operations ---

    def add_analytics_event(self, tool_id: int, event_type: str, ip_address: str = None,
                            user_agent: str = None, referrer: str = None,
                            created_at: str = None) -> int:
        """Append an event to the analytics log."""
        conn = self.connect()
        if created_at:
            cursor = conn.execute(
                """INSERT INTO analytics (tool_id, event_type, ip_address, user_agent, referrer, created_at)
                   VALUES (?, ?, ?, ?, ?, ?) RETURNING id""",
                (tool_id, event_type, ip_address, user_agent, referrer, created_at)
            )
        else:
            cursor = conn.execute(
                """INSERT INTO analytics (tool_id, event_type, ip_address, user_agent, referrer)
                   VALUES (?, ?, ?, ?, ?) RETURNING id""",
                (tool_id, event_type, ip_address, user_agent, referrer)
            )
        event_id = cursor.fetchone()[0]
        conn.commit()
        return event_id

    def record_view(self, tool_id: int, **event) -> int:
        """Log a view event and bump the tool's view counters."""
        event_id = self.add_analytics_event(tool_id, "view", **event)
        conn = self.connect()
        conn.execute(
            """UPDATE tools SET views = views + 1, views_today = views_today + 1,
               views_week = views_week + 1 WHERE id = ?""",
            (tool_id,)
        )
        conn.commit()
        return event_id

    def count_events(self, tool_id: int, event_type: str, days: int) -> int:
        """Count events of a type for a tool within the last N days."""
        return self.connect().execute(
            """SELECT COUNT(*) FROM analytics
               WHERE tool_id = ? AND event_type = ? AND created_at >= datetime('now', ?)""",
            (tool_id, event_type, f"-{days} days")
        ).fetchone()[0]

    def get_daily_views(self, tool_id: int, days: int = 7) -> list[dict]:
        """View counts grouped per day for the last N days."""
        return self._fetch_all(
            """SELECT DATE(created_at) AS date, COUNT(*) AS views
               FROM analytics
               WHERE tool_id = ? AND event_type = 'view' AND created_at >= datetime('now', ?)
               GROUP BY DATE(created_at)
               ORDER BY DATE(created_at)""",
            (tool_id, f"-{days} days")
        )

    def has_upvoted(self, tool_id: int, user_id: int = None, ip_address: str = None) -> bool:
        """Check whether a user (or IP, for anonymous votes) already upvoted."""
        conn = self.connect()
        if user_id:
            row = conn.execute(
                "SELECT 1 FROM upvotes WHERE tool_id = ? AND user_id = ?", (tool_id, user_id)
            ).fetchone()
        elif ip_address:
            row = conn.execute(
                "SELECT 1 FROM upvotes WHERE tool_id = ? AND ip_address = ?", (tool_id, ip_address)
            ).fetchone()
        else:
            return False
        return row is not None

    def add_upvote(self, tool_id: int, user_id: int = None, ip_address: str = None) -> int:
        """Record an upvote, bump the counter and log the analytics event."""
        conn = self.connect()
        cursor = conn.execute(
            "INSERT INTO upvotes (tool_id, user_id, ip_address) VALUES (?, ?, ?) RETURNING id",
            (tool_id, user_id, ip_address)
        )
        upvote_id = cursor.fetchone()[0]
        conn.execute("UPDATE tools SET upvotes = upvotes + 1 WHERE id = ?", (tool_id,))
        conn.commit()
        self.add_analytics_event(tool_id, "upvote", ip_address=ip_address)
        return upvote_id

    # --- Sponsor Operations ---

    def add_sponsor(self, name: str, logo: str, description: str, url: str,
                    tier: str = "standard", end_date: str = None) -> int:
        """Add a sponsor."""
        conn = self.connect()
        cursor = conn.execute(
            """INSERT INTO sponsors (name, logo, description, url, tier, end_date)
               VALUES (?, ?, ?, ?, ?, ?) RETURNING id""",
            (name, logo, description, url, tier, end_date)
        )
        sponsor_id = cursor.fetchone()[0]
        conn.commit()
        return sponsor_id

    def get_active_sponsors(self) -> list[dict]:
        """Sponsors with no end date or an end date in the future, premium first."""
        return self._fetch_all(
            """SELECT * FROM sponsors
               WHERE end_date IS NULL OR end_date > CURRENT_TIMESTAMP
               ORDER BY CASE tier WHEN 'premium' THEN 0 ELSE 1 END, id"""
        )

    # --- Submission Operations ---

    def add_submission(self, name: str, tagline: str, logo: str, category_id: int,
                       submitter_email: str, **fields) -> int:
        """Store a user submission with status pending."""
        values = {
            "name": name,
            "tagline": tagline,
            "logo": logo,
            "category_id": category_id,
            "submitter_email": submitter_email,
        }
        for key in ("description", "website", "twitter", "github",
                    "screenshots", "pricing", "submitter_name"):
            if fields.get(key) is not None:
                values[key] = fields[key]

        columns = ", ".join(values)
        placeholders = ", ".join("?" * len(values))
        conn = self.connect()
        cursor = conn.execute(
            f"INSERT INTO submissions ({columns}) VALUES ({placeholders}) RETURNING id",
            [_encode(v) for v in values.values()]
        )
        submission_id = cursor.fetchone()[0]
        conn.commit()
        return submission_id

    def get_submission(self, submission_id: int) -> Optional[dict]:
        """Get a submission by ID."""
        return self._fetch_one("SELECT * FROM submissions WHERE id = ?", (submission_id,))

    def list_submissions(self, status: Optional[str] = None) -> list[dict]:
        """List submissions, newest first."""
        if status:
            return self._fetch_all(
                "SELECT * FROM submissions WHERE status = ? ORDER BY created_at DESC, id DESC",
                (status,)
            )
        return self._fetch_all("SELECT * FROM submissions ORDER BY created_at DESC, id DESC")

    def set_submission_status(self, submission_id: int, status: str,
                              reviewed_by: int = None) -> Optional[dict]:
        """Mark a submission reviewed."""
        conn = self.connect()
        conn.execute(
            """UPDATE submissions SET status = ?, reviewed_by = ?, reviewed_at = CURRENT_TIMESTAMP
               WHERE id = ?""",
            (status, reviewed_by, submission_id)
        )
        conn.commit()
        return self.get_submission(submission_id)

    # --- Discovered Tool Operations ---

    def add_discovered_url(self, url: str, source: str) -> Optional[int]:
        """Queue a URL as discovered. Returns None if the URL is already known."""
        conn = self.connect()
        cursor = conn.execute(
            """INSERT INTO discovered_tools (url, source, status)
               VALUES (?, ?, 'discovered')
               ON CONFLICT(url) DO NOTHING
               RETURNING id""",
            (url, source)
        )
        row = cursor.fetchone()
        conn.commit()
        return row[0] if row else None

    def get_discovered(self, discovered_id: int) -> Optional[dict]:
        """Get a discovered row by ID."""
        return self._fetch_one("SELECT * FROM discovered_tools WHERE id = ?", (discovered_id,))

    def get_discovered_by_url(self, url: str) -> Optional[dict]:
        """Get a discovered row by URL."""
        return self._fetch_one("SELECT * FROM discovered_tools WHERE url = ?", (url,))

    def get_discovered_batch(self, status: str = "discovered", limit: int = 5) -> list[dict]:
        """Oldest discovered rows with a given status."""
        return self._fetch_all(
            """SELECT * FROM discovered_tools WHERE status = ?
               ORDER BY discovered_at ASC, id ASC LIMIT ?""",
            (status, limit)
        )

    def mark_discovered_processing(self, discovered_id: int):
        """Move a discovered row to processing."""
        conn = self.connect()
        conn.execute(
            "UPDATE discovered_tools SET status = 'processing' WHERE id = ?", (discovered_id,)
        )
        conn.commit()

    def mark_discovered_processed(self, discovered_id: int, tool_id: int,
                                  raw_data: dict = None):
        """Mark a discovered row processed, linked to its tool."""
        conn = self.connect()
        conn.execute(
            """UPDATE discovered_tools SET status = 'processed', processed_tool_id = ?,
               raw_data = COALESCE(?, raw_data), error_message = NULL,
               processed_at = CURRENT_TIMESTAMP
               WHERE id = ?""",
            (tool_id, json.dumps(raw_data) if raw_data is not None else None, discovered_id)
        )
        conn.commit()

    def mark_discovered_failed(self, discovered_id: int, error_message: str):
        """Mark a discovered row failed with the error message."""
        conn = self.connect()
        conn.execute(
            "UPDATE discovered_tools SET status = 'failed', error_message = ? WHERE id = ?",
            (error_message, discovered_id)
        )
        conn.commit()

    def list_discovered(self, limit: int = 50, status: str = None) -> list[dict]:
        """Most recently discovered rows."""
        if status:
            return self._fetch_all(
                """SELECT * FROM discovered_tools WHERE status = ?
                   ORDER BY discovered_at DESC, id DESC LIMIT ?""",
                (status, limit)
            )
        return self._fetch_all(
            "SELECT * FROM discovered_tools ORDER BY discovered_at DESC, id DESC LIMIT ?",
            (limit,)
        )

    # --- Metrics Operations ---

    def add_tool_metrics(self, tool_id: int, daily_views: int, weekly_views: int,
                         monthly_views: int, github_stars: int, traffic_score: int,
                         trend_score: int, popularity_score: int,
                         serp_position: Optional[int] = None,
                         social_mentions: int = 0) -> int:
        """Append a metrics snapshot for today."""
        conn = self.connect()
        cursor = conn.execute(
            """INSERT INTO tool_metrics
               (tool_id, date, daily_views, weekly_views, monthly_views, github_stars,
                traffic_score, trend_score, popularity_score, serp_position, social_mentions)
               VALUES (?, DATE('now'), ?, ?, ?, ?, ?, ?, ?, ?, ?)
               RETURNING id""",
            (tool_id, daily_views, weekly_views, monthly_views, github_stars,
             traffic_score, trend_score, popularity_score, serp_position, social_mentions)
        )
        metrics_id = cursor.fetchone()[0]
        conn.commit()
        return metrics_id

    def get_latest_tool_metrics(self, tool_id: int) -> Optional[dict]:
        """Most recent metrics snapshot for a tool."""
        return self._fetch_one(
            """SELECT * FROM tool_metrics WHERE tool_id = ?
               ORDER BY date DESC, id DESC LIMIT 1""",
            (tool_id,)
        )

    def get_tool_metrics_history(self, tool_id: int, limit: int = 30) -> list[dict]:
        """Metrics snapshots for a tool, newest first."""
        return self._fetch_all(
            "SELECT * FROM tool_metrics WHERE tool_id = ? ORDER BY date DESC, id DESC LIMIT ?",
            (tool_id, limit)
        )

    # --- Automation Log Operations ---

    def create_automation_log(self, log_type: str, status: str = "running") -> int:
        """Open an automation log row for a pipeline run."""
        conn = self.connect()
        cursor = conn.execute(
            "INSERT INTO automation_logs (type, status) VALUES (?, ?) RETURNING id",
            (log_type, status)
        )
        log_id = cursor.fetchone()[0]
        conn.commit()
        return log_id

    def finish_automation_log(self, log_id: int, status: str, metadata: dict):
        """Finalize an automation log row."""
        conn = self.connect()
        conn.execute(
            """UPDATE automation_logs SET status = ?, metadata = ?,
               completed_at = CURRENT_TIMESTAMP WHERE id = ?""",
            (status, json.dumps(metadata, default=str), log_id)
        )
        conn.commit()

    def get_automation_log(self, log_id: int) -> Optional[dict]:
        """Get an automation log by ID."""
        return self._fetch_one("SELECT * FROM automation_logs WHERE id = ?", (log_id,))

    def list_automation_logs(self, limit: int = 20, log_type: str = None) -> list[dict]:
        """Most recent automation logs."""
        if log_type:
            return self._fetch_all(
                "SELECT * FROM automation_logs WHERE type = ? ORDER BY id DESC LIMIT ?",
                (log_type, limit)
            )
        return self._fetch_all(
            "SELECT * FROM automation_logs ORDER BY id DESC LIMIT ?", (limit,)
        )

    # --- User Operations ---

    def create_user(self, username: str, email: str, password_hash: str,
                    is_admin: bool = False) -> int:
        """Create a new user."""
        conn = self.connect()
        cursor = conn.execute(
            """INSERT INTO users (username, email, password_hash, is_admin)
               VALUES (?, ?, ?, ?)
               RETURNING id""",
            (username, email, password_hash, 1 if is_admin else 0)
        )
        user_id = cursor.fetchone()[0]
        conn.commit()
        return user_id

    def get_user_by_username(self, username: str) -> Optional[dict]:
        """Get a user by username."""
        return self._fetch_one("SELECT * FROM users WHERE username = ?", (username,))

    def get_user_by_email(self, email: str) -> Optional[dict]:
        """Get a user by email."""
        return self._fetch_one("SELECT * FROM users WHERE email = ?", (email,))

    def get_user_by_id(self, user_id: int) -> Optional[dict]:
        """Get a user by ID."""
        return self._fetch_one("SELECT * FROM users WHERE id = ?", (user_id,))

    def update_last_login(self, user_id: int):
        """Update user's last login timestamp."""
        conn = self.connect()
        conn.execute(
            "UPDATE users SET last_login = CURRENT_TIMESTAMP WHERE id = ?",
            (user_id,)
        )
        conn.commit()

    def get_user_count(self) -> int:
        """Get total number of users."""
        conn = self.connect()
        return conn.execute("SELECT COUNT(*) FROM users").fetchone()[0]

    # --- Statistics ---

    def get_pipeline_stats(self) -> dict:
        """Get catalog and pipeline statistics."""
        conn = self.connect()

        tools_by_status = {}
        for status in TOOL_STATUSES:
            tools_by_status[status] = conn.execute(
                "SELECT COUNT(*) FROM tools WHERE status = ?", (status,)
            ).fetchone()[0]

        discovered_by_status = {}
        for status in DISCOVERY_STATUSES:
            discovered_by_status[status] = conn.execute(
                "SELECT COUNT(*) FROM discovered_tools WHERE status = ?", (status,)
            ).fetchone()[0]

        categories = conn.execute("SELECT COUNT(*) FROM categories").fetchone()[0]
        pending_submissions = conn.execute(
            "SELECT COUNT(*) FROM submissions WHERE status = 'pending'"
        ).fetchone()[0]

        return {
            "tools_by_status": tools_by_status,
            "total_tools": sum(tools_by_status.values()),
            "discovered_by_status": discovered_by_status,
            "total_categories": categories,
            "pending_submissions": pending_submissions,
        }


class EmptyCatalog:
    """Read-only stand-in for Database when no store is configured.

    Collection reads return empty lists and single-row reads return None,
    so API consumers can fall back to their own bundled data.
    """

    enabled = False

    def list_categories(self) -> list[dict]:
        return []

    def get_category(self, category_id: int) -> Optional[dict]:
        return None

    def list_tools(self, *args, **kwargs) -> list[dict]:
        return []

    def search_tools(self, *args, **kwargs) -> list[dict]:
        return []

    def get_tool_by_slug(self, slug: str, status: str = None) -> Optional[dict]:
        return None

    def get_active_sponsors(self) -> list[dict]:
        return []

    def list_submissions(self, status: Optional[str] = None) -> list[dict]:
        return []

    def list_automation_logs(self, limit: int = 20, log_type: str = None) -> list[dict]:
        return []

    def list_discovered(self, limit: int = 50, status: str = None) -> list[dict]:
        return []

    def close(self):
        pass


def init_database(db_path: str = "db/aitrends.db"):
    """Initialize the database with schema."""
    db = Database(db_path)
    db.init_schema()
    print(f"Database initialized at {db_path}")
    return db


if __name__ == "__main__":
    # Initialize database when run directly
    init_database()
