"""create oauth token authority tables

Revision ID: 7f3c1a9d2e41
Revises:
Create Date: 2026-10-18 00:00:00.000000
"""
import sqlalchemy as sa
from alembic import op

# revision identifiers, used by Alembic.
revision = '7f3c1a9d2e41'
down_revision = None
branch_labels = None
depends_on = None

client_type = sa.Enum('confidential', 'public', name='oauth_client_type')


def _token_columns():
    return [
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('token_hash', sa.String(length=64), nullable=False),
        sa.Column('jti', sa.String(length=255), nullable=True),
        sa.Column('user_id', sa.String(length=64), nullable=True),
        sa.Column('oauth_client_id', sa.Integer(), nullable=False),
        sa.Column('scope', sa.Text(), nullable=True),
        sa.Column('expires_at', sa.DateTime(timezone=True), nullable=False),
        sa.Column('is_revoked', sa.Boolean(), server_default=sa.false(), nullable=False),
        sa.Column('revoked_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
    ]


def _create_token_table(name):
    op.create_table(
        name,
        *_token_columns(),
        sa.ForeignKeyConstraint(
            ['oauth_client_id'], ['oauth_clients.id'],
            name=f'fk_{name}_oauth_client_id_oauth_clients', ondelete='CASCADE',
        ),
        sa.PrimaryKeyConstraint('id', name=f'pk_{name}'),
        sa.UniqueConstraint('token_hash', name=f'uq_{name}_token_hash'),
    )
    op.create_index(f'ix_{name}_jti', name, ['jti'], unique=False)


def upgrade():
    op.create_table(
        'users',
        sa.Column('id', sa.String(length=64), nullable=False),
        sa.Column('username', sa.String(length=50), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.PrimaryKeyConstraint('id', name='pk_users'),
        sa.UniqueConstraint('username', name='uq_users_username'),
    )
    op.create_table(
        'oauth_clients',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('client_id', sa.String(length=100), nullable=False),
        sa.Column('client_secret_hash', sa.String(length=255), nullable=True),
        sa.Column('client_secret_expires_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('client_type', client_type, nullable=False),
        sa.Column('is_active', sa.Boolean(), server_default=sa.true(), nullable=False),
        sa.Column('name', sa.String(length=120), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.CheckConstraint('length(client_id) > 0', name='ck_oauth_clients_client_id_not_empty'),
        sa.PrimaryKeyConstraint('id', name='pk_oauth_clients'),
        sa.UniqueConstraint('client_id', name='uq_oauth_clients_client_id'),
    )

    _create_token_table('access_tokens')
    op.create_index(
        'ix_access_tokens_user_client_expiry', 'access_tokens',
        ['user_id', 'oauth_client_id', 'expires_at'], unique=False,
    )
    _create_token_table('refresh_tokens')
    op.create_index(
        'ix_refresh_tokens_user_client', 'refresh_tokens', ['user_id', 'oauth_client_id'], unique=False,
    )

    op.create_table(
        'token_blacklist',
        sa.Column('jti', sa.String(length=255), nullable=False),
        sa.Column('token_type', sa.String(length=20), nullable=False),
        sa.Column('expires_at', sa.DateTime(timezone=True), nullable=False),
        sa.Column('blacklisted_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.PrimaryKeyConstraint('jti', name='pk_token_blacklist'),
    )
    op.create_index('ix_token_blacklist_expires_at', 'token_blacklist', ['expires_at'], unique=False)

    op.create_table(
        'audit_logs',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('timestamp', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column('oauth_client_id', sa.Integer(), nullable=True),
        sa.Column('actor_client_id', sa.String(length=100), nullable=True),
        sa.Column('action', sa.String(length=100), nullable=False),
        sa.Column('resource', sa.String(length=255), nullable=False),
        sa.Column('ip_address', sa.String(length=45), nullable=True),
        sa.Column('user_agent', sa.Text(), nullable=True),
        sa.Column('success', sa.Boolean(), nullable=False),
        sa.Column('details', sa.JSON(), nullable=False),
        sa.ForeignKeyConstraint(
            ['oauth_client_id'], ['oauth_clients.id'],
            name='fk_audit_logs_oauth_client_id_oauth_clients', ondelete='SET NULL',
        ),
        sa.PrimaryKeyConstraint('id', name='pk_audit_logs'),
    )
    op.create_index(
        'ix_audit_logs_client_timestamp', 'audit_logs', ['oauth_client_id', 'timestamp'], unique=False,
    )


def downgrade():
    op.drop_index('ix_audit_logs_client_timestamp', table_name='audit_logs')
    op.drop_table('audit_logs')
    op.drop_index('ix_token_blacklist_expires_at', table_name='token_blacklist')
    op.drop_table('token_blacklist')
    op.drop_index('ix_refresh_tokens_user_client', table_name='refresh_tokens')
    op.drop_index('ix_refresh_tokens_jti', table_name='refresh_tokens')
    op.drop_table('refresh_tokens')
    op.drop_index('ix_access_tokens_user_client_expiry', table_name='access_tokens')
    op.drop_index('ix_access_tokens_jti', table_name='access_tokens')
    op.drop_table('access_tokens')
    op.drop_table('oauth_clients')
    op.drop_table('users')
    client_type.drop(op.get_bind(), checkfirst=True)
