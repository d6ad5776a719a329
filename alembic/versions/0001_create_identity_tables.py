"""Create users, workspaces and authored-content tables

Revision ID: 0001
Revises:
Create Date: 2026-10-18 09:00:00.000000

"""

from typing import Sequence, Union

from alembic import op


# revision identifiers, used by Alembic.
revision: str = "0001"
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    """Upgrade schema."""
    op.execute("""
        CREATE TABLE IF NOT EXISTS users (
            id UUID PRIMARY KEY DEFAULT gen_random_uuid(),
            discord_id TEXT UNIQUE,
            email TEXT NOT NULL UNIQUE,
            name TEXT,
            avatar TEXT,
            role VARCHAR(20) NOT NULL DEFAULT 'Member'
                CHECK (role IN ('Admin', 'Team Lead', 'Member')),
            workspace_id UUID,
            onboarded BOOLEAN NOT NULL DEFAULT FALSE,
            skills TEXT[] NOT NULL DEFAULT '{}',
            interests TEXT,
            created_at TIMESTAMPTZ NOT NULL DEFAULT NOW(),
            updated_at TIMESTAMPTZ NOT NULL DEFAULT NOW()
        );

        CREATE OR REPLACE FUNCTION update_users_updated_at()
        RETURNS TRIGGER AS $$
        BEGIN
            NEW.updated_at = NOW();
            RETURN NEW;
        END;
        $$ LANGUAGE plpgsql;

        DROP TRIGGER IF EXISTS users_updated_at_trigger ON users;
        CREATE TRIGGER users_updated_at_trigger
            BEFORE UPDATE ON users
            FOR EACH ROW
            EXECUTE FUNCTION update_users_updated_at();
    """)

    op.execute("""
        CREATE TABLE IF NOT EXISTS workspaces (
            id UUID PRIMARY KEY DEFAULT gen_random_uuid(),
            name TEXT NOT NULL,
            owner_id UUID REFERENCES users(id) ON DELETE SET NULL,
            invite_code VARCHAR(6) NOT NULL UNIQUE,
            discord_channel_id TEXT,
            created_at TIMESTAMPTZ NOT NULL DEFAULT NOW()
        );

        -- A user's primary workspace; deleting the workspace unbinds them.
        ALTER TABLE users
            ADD CONSTRAINT users_workspace_id_fkey
            FOREIGN KEY (workspace_id) REFERENCES workspaces(id) ON DELETE SET NULL;

        CREATE TABLE IF NOT EXISTS workspace_members (
            user_id UUID NOT NULL REFERENCES users(id) ON DELETE CASCADE,
            workspace_id UUID NOT NULL REFERENCES workspaces(id) ON DELETE CASCADE,
            role VARCHAR(20) NOT NULL DEFAULT 'Member'
                CHECK (role IN ('Admin', 'Team Lead', 'Member')),
            name TEXT,
            created_at TIMESTAMPTZ NOT NULL DEFAULT NOW(),
            PRIMARY KEY (user_id, workspace_id)
        );

        CREATE INDEX IF NOT EXISTS idx_workspace_members_workspace_id
            ON workspace_members(workspace_id);

        CREATE TABLE IF NOT EXISTS projects (
            id UUID PRIMARY KEY DEFAULT gen_random_uuid(),
            workspace_id UUID NOT NULL REFERENCES workspaces(id) ON DELETE CASCADE,
            name TEXT NOT NULL,
            created_at TIMESTAMPTZ NOT NULL DEFAULT NOW()
        );

        CREATE INDEX IF NOT EXISTS idx_projects_workspace_id ON projects(workspace_id);
    """)

    # Authored content keeps a snapshot of the author's name, so rows survive
    # their author being deleted.
    op.execute("""
        CREATE TABLE IF NOT EXISTS activity_logs (
            id UUID PRIMARY KEY DEFAULT gen_random_uuid(),
            changed_by UUID REFERENCES users(id) ON DELETE SET NULL,
            changed_by_name TEXT,
            action TEXT NOT NULL,
            created_at TIMESTAMPTZ NOT NULL DEFAULT NOW()
        );

        CREATE TABLE IF NOT EXISTS comments (
            id UUID PRIMARY KEY DEFAULT gen_random_uuid(),
            author_id UUID REFERENCES users(id) ON DELETE SET NULL,
            author_name TEXT,
            content TEXT NOT NULL,
            created_at TIMESTAMPTZ NOT NULL DEFAULT NOW()
        );

        CREATE TABLE IF NOT EXISTS general_chat_messages (
            id UUID PRIMARY KEY DEFAULT gen_random_uuid(),
            workspace_id UUID REFERENCES workspaces(id) ON DELETE CASCADE,
            author_id UUID REFERENCES users(id) ON DELETE SET NULL,
            author_name TEXT,
            content TEXT NOT NULL,
            created_at TIMESTAMPTZ NOT NULL DEFAULT NOW()
        );

        CREATE INDEX IF NOT EXISTS idx_activity_logs_changed_by ON activity_logs(changed_by);
        CREATE INDEX IF NOT EXISTS idx_comments_author_id ON comments(author_id);
        CREATE INDEX IF NOT EXISTS idx_general_chat_messages_author_id
            ON general_chat_messages(author_id);
    """)


def downgrade() -> None:
    """Downgrade schema."""
    op.execute("""
        DROP TABLE IF EXISTS general_chat_messages;
        DROP TABLE IF EXISTS comments;
        DROP TABLE IF EXISTS activity_logs;
        DROP TABLE IF EXISTS projects;
        DROP TABLE IF EXISTS workspace_members;
        ALTER TABLE users DROP CONSTRAINT IF EXISTS users_workspace_id_fkey;
        DROP TABLE IF EXISTS workspaces;
        DROP TRIGGER IF EXISTS users_updated_at_trigger ON users;
        DROP FUNCTION IF EXISTS update_users_updated_at();
        DROP TABLE IF EXISTS users CASCADE;
    """)
