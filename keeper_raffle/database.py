"""
Database Persistence for the Raffle
Stores the raffle state, the event log and the draw history
"""

import json
import logging
from contextlib import contextmanager

from sqlalchemy import inspect, text

from .events import WinnerPicked
from .state import RafflePhase, RaffleState

logger = logging.getLogger(__name__)

# SQL schema for the raffle; {id_column} is filled per dialect
RAFFLE_SCHEMA_SQL = """
-- ============================================
-- RAFFLE DATABASE SCHEMA
-- ============================================

-- Current round, one row per raffle
CREATE TABLE IF NOT EXISTS raffle_state (
    raffle_name TEXT PRIMARY KEY,
    phase INTEGER NOT NULL DEFAULT 0,  -- 0 open, 1 calculating
    pool_balance TEXT NOT NULL DEFAULT '0',  -- integer as text, exceeds BIGINT
    last_timestamp DOUBLE PRECISION NOT NULL,
    recent_winner TEXT,  -- JSON encoded
    outstanding_request_id TEXT,  -- JSON encoded
    requested_at DOUBLE PRECISION,
    updated_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
);

-- Entrants of the current round in entry order
CREATE TABLE IF NOT EXISTS raffle_players (
    id {id_column},
    raffle_name TEXT NOT NULL,
    position INTEGER NOT NULL,
    participant TEXT NOT NULL,  -- JSON encoded
    UNIQUE(raffle_name, position)
);

-- Append-only event log
CREATE TABLE IF NOT EXISTS raffle_events (
    id {id_column},
    raffle_name TEXT NOT NULL,
    event_type VARCHAR(32) NOT NULL,
    payload TEXT NOT NULL,
    created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
);

-- Completed rounds
CREATE TABLE IF NOT EXISTS raffle_draws (
    id {id_column},
    raffle_name TEXT NOT NULL,
    request_id TEXT NOT NULL,
    winner TEXT NOT NULL,
    winner_index INTEGER NOT NULL,
    random_value TEXT NOT NULL,
    prize TEXT NOT NULL,
    total_players INTEGER NOT NULL,
    drawn_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
);

-- ============================================
-- INDICES
-- ============================================

CREATE INDEX IF NOT EXISTS idx_raffle_players_name ON raffle_players(raffle_name);
CREATE INDEX IF NOT EXISTS idx_raffle_events_name ON raffle_events(raffle_name);
CREATE INDEX IF NOT EXISTS idx_raffle_draws_name ON raffle_draws(raffle_name);
"""

REQUIRED_TABLES = ['raffle_state', 'raffle_players', 'raffle_events', 'raffle_draws']


def _id_column(engine):
    if engine.dialect.name == 'postgresql':
        return 'SERIAL PRIMARY KEY'
    return 'INTEGER PRIMARY KEY AUTOINCREMENT'


def _encode(value):
    return json.dumps(value, default=str)


def _decode(value):
    if value is None:
        return None
    return json.loads(value)


def setup_raffle_database(engine):
    """
    Create all raffle tables and indices

    Args:
        engine: SQLAlchemy engine instance

    Returns:
        bool: True if successful, False otherwise
    """
    try:
        logger.info("Setting up raffle database schema...")
        schema = RAFFLE_SCHEMA_SQL.replace('{id_column}', _id_column(engine))

        with engine.begin() as conn:
            # SQLite can only execute one statement at a time
            statements = []
            current_statement = []

            for line in schema.split('\n'):
                stripped = line.strip()
                if not stripped or stripped.startswith('--'):
                    continue

                current_statement.append(line)

                if stripped.endswith(';'):
                    statements.append('\n'.join(current_statement))
                    current_statement = []

            for statement in statements:
                conn.execute(text(statement))

        logger.info("✅ Raffle database schema created successfully")
        return True

    except Exception as e:
        logger.error(f"❌ Failed to setup raffle database: {e}")
        return False


def verify_raffle_schema(engine):
    """
    Verify that all required tables exist

    Returns:
        dict: Status of each table (True/False)
    """
    existing = set(inspect(engine).get_table_names())
    return {table: table in existing for table in REQUIRED_TABLES}


class RaffleStore:
    """Persists one raffle's state, events and draws"""

    def __init__(self, engine, raffle_name='default'):
        self.engine = engine
        self.raffle_name = raffle_name

    @contextmanager
    def transaction(self):
        """Database transaction; commits on success, rolls back on error"""
        with self.engine.begin() as conn:
            yield conn

    def save(self, state, events=(), conn=None):
        """
        Write the state and append events

        Args:
            state: RaffleState to store
            events: Committed events to append to the log
            conn: Open connection to write through (default: own transaction)
        """
        if conn is None:
            with self.transaction() as own_conn:
                self._write(own_conn, state, events)
        else:
            self._write(conn, state, events)

    def save_state(self, conn, state):
        params = {
            'raffle_name': self.raffle_name,
            'phase': int(state.phase),
            'pool_balance': str(state.pool_balance),
            'last_timestamp': state.last_timestamp,
            'recent_winner': None if state.recent_winner is None else _encode(state.recent_winner),
            'outstanding_request_id': (
                None if state.outstanding_request_id is None else _encode(state.outstanding_request_id)
            ),
            'requested_at': state.requested_at,
        }

        conn.execute(text("DELETE FROM raffle_state WHERE raffle_name = :raffle_name"),
                     {'raffle_name': self.raffle_name})
        conn.execute(text("""
            INSERT INTO raffle_state
                (raffle_name, phase, pool_balance, last_timestamp,
                 recent_winner, outstanding_request_id, requested_at)
            VALUES
                (:raffle_name, :phase, :pool_balance, :last_timestamp,
                 :recent_winner, :outstanding_request_id, :requested_at)
        """), params)

        conn.execute(text("DELETE FROM raffle_players WHERE raffle_name = :raffle_name"),
                     {'raffle_name': self.raffle_name})
        if state.players:
            conn.execute(text("""
                INSERT INTO raffle_players (raffle_name, position, participant)
                VALUES (:raffle_name, :position, :participant)
            """), [
                {'raffle_name': self.raffle_name, 'position': i, 'participant': _encode(player)}
                for i, player in enumerate(state.players)
            ])

    def append_events(self, conn, events):
        for event in events:
            conn.execute(text("""
                INSERT INTO raffle_events (raffle_name, event_type, payload)
                VALUES (:raffle_name, :event_type, :payload)
            """), {
                'raffle_name': self.raffle_name,
                'event_type': event.name,
                'payload': _encode(event.to_dict()),
            })

            if isinstance(event, WinnerPicked):
                conn.execute(text("""
                    INSERT INTO raffle_draws
                        (raffle_name, request_id, winner, winner_index,
                         random_value, prize, total_players)
                    VALUES
                        (:raffle_name, :request_id, :winner, :winner_index,
                         :random_value, :prize, :total_players)
                """), {
                    'raffle_name': self.raffle_name,
                    'request_id': _encode(event.request_id),
                    'winner': _encode(event.winner),
                    'winner_index': event.winner_index,
                    'random_value': str(event.random_value),
                    'prize': str(event.prize),
                    'total_players': event.player_count,
                })

    def _write(self, conn, state, events):
        self.save_state(conn, state)
        self.append_events(conn, events)

    def load(self):
        """
        Load the stored state for this raffle

        Returns:
            RaffleState or None if nothing was saved yet
        """
        with self.engine.begin() as conn:
            row = conn.execute(text("""
                SELECT phase, pool_balance, last_timestamp, recent_winner,
                       outstanding_request_id, requested_at
                FROM raffle_state
                WHERE raffle_name = :raffle_name
            """), {'raffle_name': self.raffle_name}).fetchone()

            if not row:
                return None

            players = conn.execute(text("""
                SELECT participant FROM raffle_players
                WHERE raffle_name = :raffle_name
                ORDER BY position
            """), {'raffle_name': self.raffle_name})

            return RaffleState(
                phase=RafflePhase(row[0]),
                pool_balance=int(row[1]),
                last_timestamp=row[2],
                recent_winner=_decode(row[3]),
                outstanding_request_id=_decode(row[4]),
                requested_at=row[5],
                players=[_decode(p[0]) for p in players],
            )

    def get_draw_history(self, limit=5):
        """
        Get recent draw results, newest first

        Returns:
            list: List of draw dicts
        """
        with self.engine.begin() as conn:
            result = conn.execute(text("""
                SELECT request_id, winner, winner_index, random_value,
                       prize, total_players, drawn_at
                FROM raffle_draws
                WHERE raffle_name = :raffle_name
                ORDER BY id DESC
                LIMIT :limit
            """), {'raffle_name': self.raffle_name, 'limit': limit})

            history = []
            for row in result:
                history.append({
                    'request_id': _decode(row[0]),
                    'winner': _decode(row[1]),
                    'winner_index': row[2],
                    'random_value': int(row[3]),
                    'prize': int(row[4]),
                    'total_players': row[5],
                    'drawn_at': row[6],
                })
            return history

    def get_events(self, limit=100):
        """Stored events in log order (oldest first)"""
        with self.engine.begin() as conn:
            result = conn.execute(text("""
                SELECT event_type, payload FROM (
                    SELECT id, event_type, payload FROM raffle_events
                    WHERE raffle_name = :raffle_name
                    ORDER BY id DESC
                    LIMIT :limit
                ) recent
                ORDER BY id
            """), {'raffle_name': self.raffle_name, 'limit': limit})

            return [{'event_type': row[0], 'data': json.loads(row[1])} for row in result]
