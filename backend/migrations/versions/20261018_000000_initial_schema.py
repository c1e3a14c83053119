"""initial schema: admins, certificates, audit_logs

Revision ID: 20261018_000000
Revises:
Create Date: 2026-10-18 00:00:00

"""
from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision = '20261018_000000'
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    op.create_table(
        'admins',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('username', sa.String(30), nullable=False),
        sa.Column('email', sa.String(255), nullable=False),
        sa.Column('password_hash', sa.String(255), nullable=False),
        sa.Column('full_name', sa.String(255), nullable=False),
        sa.Column('role', sa.String(20), nullable=False, server_default='admin'),
        sa.Column('can_create_certificates', sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column('can_edit_certificates', sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column('can_delete_certificates', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column('can_revoke_certificates', sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column('can_view_analytics', sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column('can_manage_admins', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column('is_active', sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column('last_login', sa.TIMESTAMP(timezone=True), nullable=True),
        sa.Column('last_login_ip', sa.String(45), nullable=True),
        sa.Column('failed_login_count', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('last_failed_login_at', sa.TIMESTAMP(timezone=True), nullable=True),
        sa.Column('created_by', sa.String(30), nullable=True),
        sa.Column('updated_by', sa.String(30), nullable=True),
        sa.Column('created_at', sa.TIMESTAMP(timezone=True), server_default=sa.func.now()),
        sa.Column('updated_at', sa.TIMESTAMP(timezone=True), server_default=sa.func.now()),
    )
    op.create_index('ix_admins_id', 'admins', ['id'])
    op.create_index('ix_admins_username', 'admins', ['username'], unique=True)
    op.create_index('ix_admins_email', 'admins', ['email'], unique=True)
    op.create_index('ix_admins_is_active', 'admins', ['is_active'])

    op.create_table(
        'certificates',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('certificate_id', sa.String(7), nullable=False),
        sa.Column('recipient_name', sa.String(100), nullable=False),
        sa.Column('recipient_email', sa.String(255), nullable=False),
        sa.Column('program', sa.String(50), nullable=False),
        sa.Column('program_category', sa.String(2), nullable=False),
        sa.Column('award_date', sa.Date(), nullable=False),
        sa.Column('verification_hash', sa.String(64), nullable=False, unique=True),
        sa.Column('is_verified', sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column('verification_count', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('last_verified_at', sa.TIMESTAMP(timezone=True), nullable=True),
        sa.Column('ip_addresses', sa.JSON(), nullable=False),
        sa.Column('issued_by', sa.String(100), nullable=False),
        sa.Column('certificate_url', sa.String(500), nullable=True),
        sa.Column('notes', sa.Text(), nullable=True),
        sa.Column('is_revoked', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column('revoked_at', sa.TIMESTAMP(timezone=True), nullable=True),
        sa.Column('revocation_reason', sa.Text(), nullable=True),
        sa.Column('created_by', sa.String(30), nullable=True),
        sa.Column('updated_by', sa.String(30), nullable=True),
        sa.Column('created_at', sa.TIMESTAMP(timezone=True), server_default=sa.func.now()),
        sa.Column('updated_at', sa.TIMESTAMP(timezone=True), server_default=sa.func.now()),
    )
    op.create_index('ix_certificates_id', 'certificates', ['id'])
    op.create_index('ix_certificates_certificate_id', 'certificates', ['certificate_id'], unique=True)
    op.create_index('ix_certificates_recipient_email', 'certificates', ['recipient_email'])
    op.create_index('ix_certificates_is_verified', 'certificates', ['is_verified'])
    op.create_index('ix_certificates_is_revoked', 'certificates', ['is_revoked'])
    op.create_index('idx_certificates_award_date', 'certificates', ['award_date'])
    op.create_index('idx_certificates_created_at', 'certificates', ['created_at'])

    op.create_table(
        'audit_logs',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('action', sa.String(20), nullable=False),
        sa.Column('entity_type', sa.String(20), nullable=False),
        sa.Column('entity_id', sa.String(50), nullable=True),
        sa.Column('status', sa.String(10), nullable=False, server_default='SUCCESS'),
        sa.Column('performed_by', sa.Integer(), sa.ForeignKey('admins.id', ondelete='SET NULL'), nullable=True),
        sa.Column('performed_by_username', sa.String(30), nullable=True),
        sa.Column('details', sa.JSON(), nullable=True),
        sa.Column('error_message', sa.Text(), nullable=True),
        sa.Column('changes', sa.JSON(), nullable=True),
        sa.Column('ip_address', sa.String(45), nullable=True),
        sa.Column('user_agent', sa.Text(), nullable=True),
        sa.Column('created_at', sa.TIMESTAMP(timezone=True), server_default=sa.func.now()),
    )
    op.create_index('ix_audit_logs_id', 'audit_logs', ['id'])
    op.create_index('idx_audit_logs_entity', 'audit_logs', ['entity_type', 'entity_id'])
    op.create_index('idx_audit_logs_performed_by', 'audit_logs', ['performed_by'])
    op.create_index('idx_audit_logs_action', 'audit_logs', ['action'])
    op.create_index('idx_audit_logs_created_at', 'audit_logs', ['created_at'])


def downgrade() -> None:
    op.drop_table('audit_logs')
    op.drop_table('certificates')
    op.drop_table('admins')
