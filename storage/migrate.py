"""SQLite schema migrations."""
from __future__ import annotations

import os
import sqlite3
from typing import Iterable

SCHEMA: Iterable[str] = [
    """
CREATE TABLE IF NOT EXISTS sessions (
  id TEXT PRIMARY KEY,
  user_id TEXT,
  mode TEXT NOT NULL,
  question_count INTEGER NOT NULL CHECK (question_count BETWEEN 3 AND 10),
  low_anxiety_enabled INTEGER NOT NULL DEFAULT 0,
  job_description_text TEXT,
  completion_rate REAL NOT NULL DEFAULT 0 CHECK (completion_rate BETWEEN 0 AND 1),
  avg_score REAL,
  started_at TEXT NOT NULL,
  completed_at TEXT,
  draft_save TEXT,
  CHECK (low_anxiety_enabled = 0 OR question_count = 3)
);
""",
    """
CREATE INDEX IF NOT EXISTS idx_sessions_user_started ON sessions (user_id, started_at);
""",
    """
CREATE TABLE IF NOT EXISTS questions (
  id TEXT PRIMARY KEY,
  session_id TEXT NOT NULL REFERENCES sessions(id),
  question_order INTEGER NOT NULL,
  question_text TEXT NOT NULL,
  category TEXT NOT NULL,
  is_tailored INTEGER NOT NULL DEFAULT 0,
  is_gentle INTEGER NOT NULL DEFAULT 0,
  created_at TEXT NOT NULL,
  UNIQUE (session_id, question_order)
);
""",
    """
CREATE TABLE IF NOT EXISTS answers (
  id TEXT PRIMARY KEY,
  session_id TEXT NOT NULL REFERENCES sessions(id),
  question_id TEXT NOT NULL UNIQUE REFERENCES questions(id),
  transcript_text TEXT NOT NULL,
  duration_seconds INTEGER,
  retake_used INTEGER NOT NULL DEFAULT 0,
  extension_used INTEGER NOT NULL DEFAULT 0,
  star_situation_score INTEGER,
  star_task_score INTEGER,
  star_action_score INTEGER,
  star_result_score INTEGER,
  specificity_tag TEXT,
  impact_tag TEXT,
  clarity_tag TEXT,
  honesty_flag INTEGER,
  created_at TEXT NOT NULL
);
""",
    """
CREATE TABLE IF NOT EXISTS reports (
  id TEXT PRIMARY KEY,
  session_id TEXT NOT NULL UNIQUE REFERENCES sessions(id),
  strengths_json TEXT NOT NULL,
  clarifications_json TEXT NOT NULL,
  feedback_json TEXT NOT NULL,
  created_at TEXT NOT NULL,
  updated_at TEXT NOT NULL
);
""",
    """
CREATE TABLE IF NOT EXISTS coaching_locks (
  session_id TEXT PRIMARY KEY,
  token TEXT NOT NULL,
  claimed_at TEXT NOT NULL
);
""",
    """
CREATE TABLE IF NOT EXISTS cost_records (
  id INTEGER PRIMARY KEY AUTOINCREMENT,
  model TEXT NOT NULL,
  tokens_used INTEGER,
  audio_seconds REAL,
  estimated_cost_usd REAL NOT NULL,
  period_start TEXT NOT NULL,
  period_end TEXT NOT NULL,
  created_at TEXT NOT NULL
);
""",
    """
CREATE TABLE IF NOT EXISTS system_config (
  key TEXT PRIMARY KEY,
  value TEXT NOT NULL,
  updated_at TEXT NOT NULL
);
""",
    """
CREATE TABLE IF NOT EXISTS audit_logs (
  id INTEGER PRIMARY KEY AUTOINCREMENT,
  timestamp TEXT NOT NULL,
  actor_id TEXT,
  action_type TEXT NOT NULL,
  resource_type TEXT NOT NULL,
  resource_id TEXT,
  details TEXT
);
""",
    """
CREATE TABLE IF NOT EXISTS events (
  id INTEGER PRIMARY KEY AUTOINCREMENT,
  timestamp TEXT NOT NULL,
  event_type TEXT NOT NULL,
  session_id TEXT,
  user_id TEXT,
  payload TEXT
);
""",
]


def migrate(db_path: str = "data/practice.db") -> None:
    """Apply schema migrations to the SQLite database."""

    directory = os.path.dirname(db_path) or "."
    os.makedirs(directory, exist_ok=True)
    conn = sqlite3.connect(db_path)
    try:
        cur = conn.cursor()
        for stmt in SCHEMA:
            cur.execute(stmt)
        conn.commit()
    finally:
        conn.close()


if __name__ == "__main__":
    migrate()
