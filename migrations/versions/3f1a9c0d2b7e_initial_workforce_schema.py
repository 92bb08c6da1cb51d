"""initial workforce schema (users, partners, employees, payments, routes, jobs)

Revision ID: 3f1a9c0d2b7e
Revises:
Create Date: 2026-10-17 00:00:00.000000

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = '3f1a9c0d2b7e'
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

STATUSES = ('pending', 'approved', 'completed')


def upgrade() -> None:
    op.create_table(
        'users',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('email', sa.String(255), nullable=False),
        sa.Column('password_hash', sa.String(255), nullable=False),
        sa.Column('full_name', sa.String(255), nullable=True),
        sa.Column('role', sa.Enum('admin', 'partner', 'staff', name='user_role_enum'), nullable=False),
        sa.Column('status', sa.String(20), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=True),
    )
    op.create_index('ix_users_email', 'users', ['email'], unique=True)

    op.create_table(
        'partners',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('user_id', sa.Integer(), sa.ForeignKey('users.id', ondelete='CASCADE'), nullable=False, unique=True),
        sa.Column('company_name', sa.String(255), nullable=False),
        sa.Column('company_details', sa.Text(), nullable=False),
        sa.Column('contact_person', sa.String(120), nullable=True),
        sa.Column('contact_phone', sa.String(40), nullable=True),
        sa.Column('created_by', sa.Integer(), sa.ForeignKey('users.id', ondelete='SET NULL'), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=False),
    )

    op.create_table(
        'employees',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('code', sa.String(64), nullable=False, unique=True),
        sa.Column('name', sa.String(255), nullable=False),
        sa.Column('nid', sa.String(64), nullable=False),
        sa.Column('photo', sa.String(500), nullable=True),
        sa.Column('details', sa.JSON(), nullable=True),
        sa.Column('salary', sa.Numeric(14, 2), nullable=False),
        sa.Column('provider_kind', sa.Enum('house', 'partner', name='employee_provider_enum'), nullable=False),
        sa.Column('partner_id', sa.Integer(), sa.ForeignKey('partners.id', ondelete='RESTRICT'), nullable=True),
        sa.Column('approval_status', sa.Enum('pending', 'approved', name='employee_approval_enum'), nullable=False),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.Column('updated_at', sa.DateTime(), nullable=True),
        sa.CheckConstraint(
            "(provider_kind = 'house' AND partner_id IS NULL) OR "
            "(provider_kind = 'partner' AND partner_id IS NOT NULL)",
            name='ck_employee_provider',
        ),
    )
    op.create_index('ix_emp_partner_id', 'employees', ['partner_id'])
    op.create_index('ix_emp_created_at', 'employees', ['created_at'])

    op.create_table(
        'payments',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('employee_id', sa.Integer(), sa.ForeignKey('employees.id', ondelete='RESTRICT'), nullable=False),
        sa.Column('amount', sa.Numeric(14, 2), nullable=False),
        sa.Column('due_date', sa.Date(), nullable=False),
        sa.Column('paid_date', sa.DateTime(), nullable=True),
        sa.Column('status', sa.Enum(*STATUSES, name='payment_status_enum'), nullable=False),
        sa.Column('paid_by', sa.Integer(), sa.ForeignKey('users.id', ondelete='SET NULL'), nullable=True),
        sa.Column('proof_url', sa.String(500), nullable=True),
        sa.Column('notes', sa.Text(), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.Column('updated_at', sa.DateTime(), nullable=True),
    )
    op.create_index('ix_payments_employee_id', 'payments', ['employee_id'])
    op.create_index('ix_payments_due_date', 'payments', ['due_date'])
    op.create_index('ix_payments_status', 'payments', ['status'])

    op.create_table(
        'partner_payments',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('partner_id', sa.Integer(), sa.ForeignKey('partners.id', ondelete='RESTRICT'), nullable=False),
        sa.Column('amount', sa.Numeric(14, 2), nullable=False),
        sa.Column('due_date', sa.Date(), nullable=False),
        sa.Column('paid_date', sa.DateTime(), nullable=True),
        sa.Column('status', sa.Enum(*STATUSES, name='partner_payment_status_enum'), nullable=False),
        sa.Column('paid_by', sa.Integer(), sa.ForeignKey('users.id', ondelete='SET NULL'), nullable=True),
        sa.Column('proof_url', sa.String(500), nullable=True),
        sa.Column('notes', sa.Text(), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.Column('updated_at', sa.DateTime(), nullable=True),
    )
    op.create_index('ix_partner_payments_partner_id', 'partner_payments', ['partner_id'])
    op.create_index('ix_partner_payments_due_date', 'partner_payments', ['due_date'])
    op.create_index('ix_partner_payments_status', 'partner_payments', ['status'])

    op.create_table(
        'routes',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('name', sa.String(255), nullable=False),
        sa.Column('point_a', sa.String(255), nullable=False),
        sa.Column('point_b', sa.String(255), nullable=False),
        sa.Column('created_by', sa.Integer(), sa.ForeignKey('users.id', ondelete='SET NULL'), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=False),
    )

    op.create_table(
        'jobs',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('route_id', sa.Integer(), sa.ForeignKey('routes.id', ondelete='RESTRICT'), nullable=False),
        sa.Column('status', sa.Enum('active', 'inactive', name='job_status_enum'), nullable=False),
        sa.Column('created_by', sa.Integer(), sa.ForeignKey('users.id', ondelete='SET NULL'), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=False),
    )
    op.create_index('ix_jobs_route_id', 'jobs', ['route_id'])

    op.create_table(
        'job_employees',
        sa.Column('job_id', sa.Integer(), sa.ForeignKey('jobs.id', ondelete='CASCADE'), primary_key=True),
        sa.Column('employee_id', sa.Integer(), sa.ForeignKey('employees.id', ondelete='RESTRICT'), primary_key=True),
    )


def downgrade() -> None:
    op.drop_table('job_employees')
    op.drop_index('ix_jobs_route_id', table_name='jobs')
    op.drop_table('jobs')
    op.drop_table('routes')
    op.drop_index('ix_partner_payments_status', table_name='partner_payments')
    op.drop_index('ix_partner_payments_due_date', table_name='partner_payments')
    op.drop_index('ix_partner_payments_partner_id', table_name='partner_payments')
    op.drop_table('partner_payments')
    op.drop_index('ix_payments_status', table_name='payments')
    op.drop_index('ix_payments_due_date', table_name='payments')
    op.drop_index('ix_payments_employee_id', table_name='payments')
    op.drop_table('payments')
    op.drop_index('ix_emp_created_at', table_name='employees')
    op.drop_index('ix_emp_partner_id', table_name='employees')
    op.drop_table('employees')
    op.drop_table('partners')
    op.drop_index('ix_users_email', table_name='users')
    op.drop_table('users')

    bind = op.get_bind()
    for name in ('job_status_enum', 'partner_payment_status_enum', 'payment_status_enum',
                 'employee_approval_enum', 'employee_provider_enum', 'user_role_enum'):
        sa.Enum(name=name).drop(bind, checkfirst=True)
