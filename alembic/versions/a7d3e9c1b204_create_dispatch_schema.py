"""create dispatch schema

Revision ID: a7d3e9c1b204
Revises:
Create Date: 2026-10-17 09:00:00.000000

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = 'a7d3e9c1b204'
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def _audit_columns():
	return [
		sa.Column('is_deleted', sa.Boolean(), nullable=False, server_default=sa.false()),
		sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('CURRENT_TIMESTAMP'), nullable=False),
		sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.text('CURRENT_TIMESTAMP'), nullable=False),
		sa.Column('deleted_at', sa.DateTime(timezone=True), nullable=True),
	]


def upgrade() -> None:
	"""Upgrade schema."""
	op.create_table(
		'vendors',
		sa.Column('id', sa.Integer(), nullable=False),
		sa.Column('name', sa.String(), nullable=False),
		sa.Column('phone_number', sa.String(), nullable=False),
		sa.Column('email', sa.String(), nullable=False),
		sa.Column('is_active', sa.Boolean(), nullable=False, server_default=sa.true()),
		sa.Column('notes', sa.Text(), nullable=True),
		sa.Column('total_jobs', sa.Integer(), nullable=False, server_default='0'),
		sa.Column('completed_jobs', sa.Integer(), nullable=False, server_default='0'),
		sa.Column('average_rating', sa.Float(), nullable=False, server_default='0'),
		*_audit_columns(),
		sa.PrimaryKeyConstraint('id', name=op.f('pk_vendors'))
	)
	op.create_index('ix_vendors_id', 'vendors', ['id'], unique=False)
	op.create_index('ix_vendors_email', 'vendors', ['email'], unique=True)

	op.create_table(
		'users',
		sa.Column('id', sa.Integer(), nullable=False),
		sa.Column('email', sa.String(), nullable=False),
		sa.Column('name', sa.String(), nullable=False),
		sa.Column('hashed_password', sa.String(), nullable=False),
		sa.Column('role', sa.String(length=32), nullable=False, server_default='registered_user'),
		sa.Column('vendor_id', sa.Integer(), nullable=True),
		sa.Column('permissions', sa.JSON(), nullable=False),
		sa.Column('is_active', sa.Boolean(), nullable=True),
		sa.Column('last_login', sa.DateTime(timezone=True), nullable=True),
		*_audit_columns(),
		sa.ForeignKeyConstraint(['vendor_id'], ['vendors.id'], ondelete='SET NULL', name=op.f('fk_users_vendor_id_vendors')),
		sa.PrimaryKeyConstraint('id', name=op.f('pk_users'))
	)
	op.create_index('ix_users_id', 'users', ['id'], unique=False)
	op.create_index('ix_users_email', 'users', ['email'], unique=True)
	op.create_index('ix_users_vendor_id', 'users', ['vendor_id'], unique=False)

	op.create_table(
		'jobs',
		sa.Column('id', sa.Integer(), nullable=False),
		sa.Column('so_number', sa.String(), nullable=False),
		sa.Column('customer_name', sa.String(), nullable=False),
		sa.Column('customer_last_name', sa.String(), nullable=False),
		sa.Column('customer_address', sa.String(), nullable=False),
		sa.Column('customer_city', sa.String(), nullable=False),
		sa.Column('customer_state', sa.String(), nullable=False),
		sa.Column('customer_zip', sa.String(), nullable=False),
		sa.Column('customer_phone', sa.String(), nullable=False),
		sa.Column('customer_email', sa.String(), nullable=True),
		sa.Column('appliance_type', sa.String(), nullable=False),
		sa.Column('appliance_brand', sa.String(), nullable=True),
		sa.Column('model_number', sa.String(), nullable=True),
		sa.Column('serial_number', sa.String(), nullable=True),
		sa.Column('service_description', sa.Text(), nullable=False),
		sa.Column('scheduled_date', sa.DateTime(timezone=True), nullable=False),
		sa.Column('scheduled_time_window', sa.String(), nullable=False),
		sa.Column('priority', sa.String(length=16), nullable=False, server_default='medium'),
		sa.Column('status', sa.String(length=16), nullable=False, server_default='available'),
		sa.Column('notes', sa.Text(), nullable=True),
		sa.Column('internal_notes', sa.Text(), nullable=True),
		sa.Column('is_under_warranty', sa.Boolean(), nullable=False, server_default=sa.false()),
		sa.Column('warranty_number', sa.String(), nullable=True),
		sa.Column('warranty_expiry', sa.DateTime(timezone=True), nullable=True),
		sa.Column('created_by', sa.Integer(), nullable=True),
		*_audit_columns(),
		sa.ForeignKeyConstraint(['created_by'], ['users.id'], ondelete='SET NULL', name=op.f('fk_jobs_created_by_users')),
		sa.PrimaryKeyConstraint('id', name=op.f('pk_jobs'))
	)
	op.create_index('ix_jobs_id', 'jobs', ['id'], unique=False)
	op.create_index('ix_jobs_so_number', 'jobs', ['so_number'], unique=True)
	op.create_index('ix_jobs_appliance_type', 'jobs', ['appliance_type'], unique=False)
	op.create_index('ix_jobs_status', 'jobs', ['status'], unique=False)
	op.create_index('ix_jobs_status_scheduled_date', 'jobs', ['status', 'scheduled_date'], unique=False)
	op.create_index('ix_jobs_city_state', 'jobs', ['customer_city', 'customer_state'], unique=False)

	op.create_table(
		'assignments',
		sa.Column('id', sa.Integer(), nullable=False),
		sa.Column('job_id', sa.Integer(), nullable=False),
		sa.Column('vendor_id', sa.Integer(), nullable=False),
		sa.Column('status', sa.String(length=32), nullable=False, server_default='assigned'),
		sa.Column('assigned_at', sa.DateTime(timezone=True), server_default=sa.text('CURRENT_TIMESTAMP'), nullable=False),
		sa.Column('scheduled_arrival', sa.DateTime(timezone=True), nullable=True),
		sa.Column('actual_arrival', sa.DateTime(timezone=True), nullable=True),
		sa.Column('work_started', sa.DateTime(timezone=True), nullable=True),
		sa.Column('completed_at', sa.DateTime(timezone=True), nullable=True),
		sa.Column('notes', sa.Text(), nullable=True),
		sa.Column('vendor_notes', sa.Text(), nullable=True),
		sa.Column('completion_notes', sa.Text(), nullable=True),
		sa.Column('customer_signature', sa.Text(), nullable=True),
		sa.Column('labor_hours', sa.Float(), nullable=False, server_default='0'),
		sa.Column('total_parts_cost', sa.Numeric(precision=12, scale=2), nullable=False, server_default='0'),
		sa.Column('total_labor_cost', sa.Numeric(precision=12, scale=2), nullable=False, server_default='0'),
		sa.Column('total_cost', sa.Numeric(precision=12, scale=2), nullable=False, server_default='0'),
		sa.Column('reschedule_original_date', sa.DateTime(timezone=True), nullable=True),
		sa.Column('reschedule_new_date', sa.DateTime(timezone=True), nullable=True),
		sa.Column('reschedule_reason', sa.Text(), nullable=True),
		sa.Column('reschedule_requested_at', sa.DateTime(timezone=True), nullable=True),
		sa.Column('invoice_number', sa.String(length=32), nullable=True),
		sa.Column('invoice_generated_at', sa.DateTime(timezone=True), nullable=True),
		sa.Column('invoice_pdf_url', sa.String(), nullable=True),
		*_audit_columns(),
		sa.ForeignKeyConstraint(['job_id'], ['jobs.id'], ondelete='CASCADE', name=op.f('fk_assignments_job_id_jobs')),
		sa.ForeignKeyConstraint(['vendor_id'], ['vendors.id'], ondelete='CASCADE', name=op.f('fk_assignments_vendor_id_vendors')),
		sa.PrimaryKeyConstraint('id', name=op.f('pk_assignments')),
		sa.UniqueConstraint('invoice_number', name=op.f('uq_assignments_invoice_number'))
	)
	op.create_index('ix_assignments_id', 'assignments', ['id'], unique=False)
	op.create_index('ix_assignments_job_id', 'assignments', ['job_id'], unique=False)
	op.create_index('ix_assignments_vendor_id', 'assignments', ['vendor_id'], unique=False)
	op.create_index('ix_assignments_assigned_at', 'assignments', ['assigned_at'], unique=False)
	op.create_index('ix_assignments_vendor_status', 'assignments', ['vendor_id', 'status'], unique=False)

	op.create_table(
		'parts',
		sa.Column('id', sa.Integer(), nullable=False),
		sa.Column('assignment_id', sa.Integer(), nullable=False),
		sa.Column('part_number', sa.String(), nullable=False),
		sa.Column('part_name', sa.String(), nullable=False),
		sa.Column('quantity', sa.Integer(), nullable=False),
		sa.Column('unit_cost', sa.Numeric(precision=12, scale=2), nullable=False),
		sa.Column('line_total', sa.Numeric(precision=12, scale=2), nullable=False),
		sa.Column('notes', sa.Text(), nullable=True),
		sa.Column('added_by', sa.Integer(), nullable=True),
		*_audit_columns(),
		sa.ForeignKeyConstraint(['assignment_id'], ['assignments.id'], ondelete='CASCADE', name=op.f('fk_parts_assignment_id_assignments')),
		sa.ForeignKeyConstraint(['added_by'], ['users.id'], ondelete='SET NULL', name=op.f('fk_parts_added_by_users')),
		sa.PrimaryKeyConstraint('id', name=op.f('pk_parts'))
	)
	op.create_index('ix_parts_id', 'parts', ['id'], unique=False)
	op.create_index('ix_parts_assignment_id', 'parts', ['assignment_id'], unique=False)

	op.create_table(
		'photos',
		sa.Column('id', sa.Integer(), nullable=False),
		sa.Column('assignment_id', sa.Integer(), nullable=False),
		sa.Column('part_id', sa.Integer(), nullable=True),
		sa.Column('filename', sa.String(), nullable=False),
		sa.Column('original_name', sa.String(), nullable=True),
		sa.Column('url', sa.String(), nullable=False),
		sa.Column('mime_type', sa.String(), nullable=True),
		sa.Column('size', sa.Integer(), nullable=True),
		sa.Column('description', sa.Text(), nullable=True),
		sa.Column('photo_type', sa.String(length=16), nullable=False, server_default='general'),
		sa.Column('uploaded_by', sa.Integer(), nullable=True),
		*_audit_columns(),
		sa.ForeignKeyConstraint(['assignment_id'], ['assignments.id'], ondelete='CASCADE', name=op.f('fk_photos_assignment_id_assignments')),
		sa.ForeignKeyConstraint(['part_id'], ['parts.id'], ondelete='CASCADE', name=op.f('fk_photos_part_id_parts')),
		sa.ForeignKeyConstraint(['uploaded_by'], ['users.id'], ondelete='SET NULL', name=op.f('fk_photos_uploaded_by_users')),
		sa.PrimaryKeyConstraint('id', name=op.f('pk_photos'))
	)
	op.create_index('ix_photos_id', 'photos', ['id'], unique=False)
	op.create_index('ix_photos_assignment_id', 'photos', ['assignment_id'], unique=False)
	op.create_index('ix_photos_part_id', 'photos', ['part_id'], unique=False)

	op.create_table(
		'request_logs',
		sa.Column('id', sa.Integer(), nullable=False),
		sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('CURRENT_TIMESTAMP'), nullable=False),
		sa.Column('correlation_id', sa.String(length=64), nullable=False),
		sa.Column('direction', sa.String(length=16), nullable=False),
		sa.Column('connection_type', sa.String(length=16), nullable=True),
		sa.Column('method', sa.String(length=16), nullable=True),
		sa.Column('path_template', sa.String(length=512), nullable=True),
		sa.Column('raw_path', sa.String(length=512), nullable=True),
		sa.Column('route_name', sa.String(length=128), nullable=True),
		sa.Column('status_code', sa.Integer(), nullable=True),
		sa.Column('duration_ms', sa.Integer(), nullable=False),
		sa.Column('client_ip', sa.String(length=64), nullable=True),
		sa.Column('user_agent', sa.String(length=256), nullable=True),
		sa.Column('auth_type', sa.String(length=16), nullable=True),
		sa.Column('user_id', sa.Integer(), nullable=True),
		sa.Column('vendor_id', sa.Integer(), nullable=True),
		sa.Column('provider', sa.String(length=64), nullable=True),
		sa.Column('target', sa.String(length=256), nullable=True),
		sa.Column('error_code', sa.String(length=64), nullable=True),
		sa.PrimaryKeyConstraint('id', name=op.f('pk_request_logs'))
	)
	op.create_index('ix_request_logs_created_at', 'request_logs', ['created_at'], unique=False)
	op.create_index('ix_request_logs_correlation_id', 'request_logs', ['correlation_id'], unique=False)
	op.create_index('ix_request_logs_path_template', 'request_logs', ['path_template'], unique=False)
	op.create_index('ix_request_logs_status_code', 'request_logs', ['status_code'], unique=False)
	op.create_index('ix_request_logs_user_id', 'request_logs', ['user_id'], unique=False)
	op.create_index('ix_request_logs_vendor_id', 'request_logs', ['vendor_id'], unique=False)
	op.create_index('ix_request_logs_provider', 'request_logs', ['provider'], unique=False)
	op.create_index('ix_request_logs_target', 'request_logs', ['target'], unique=False)
	op.create_index('ix_request_logs_error_code', 'request_logs', ['error_code'], unique=False)
	op.create_index('ix_request_logs_direction_created_at', 'request_logs', ['direction', 'created_at'], unique=False)


def downgrade() -> None:
	"""Downgrade schema."""
	op.drop_table('request_logs')
	op.drop_table('photos')
	op.drop_table('parts')
	op.drop_table('assignments')
	op.drop_table('jobs')
	op.drop_table('users')
	op.drop_table('vendors')
