"""employee levels

Revision ID: 7c4e2a1b9d05
Revises: 3f1a9c0d2b7e
Create Date: 2026-10-17 00:00:00.000000

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = '7c4e2a1b9d05'
down_revision: Union[str, Sequence[str], None] = '3f1a9c0d2b7e'
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        'employee_levels',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('level_name', sa.String(120), nullable=False, unique=True),
        sa.Column('base_salary', sa.Numeric(14, 2), nullable=False),
        sa.Column('created_by', sa.Integer(), sa.ForeignKey('users.id', ondelete='SET NULL'), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=False),
    )

    with op.batch_alter_table('employees') as batch_op:
        batch_op.add_column(sa.Column('level_id', sa.Integer(), nullable=True))
        batch_op.create_foreign_key(
            'fk_employees_level_id', 'employee_levels', ['level_id'], ['id'], ondelete='RESTRICT',
        )
        batch_op.create_index('ix_emp_level_id', ['level_id'])


def downgrade() -> None:
    with op.batch_alter_table('employees') as batch_op:
        batch_op.drop_index('ix_emp_level_id')
        batch_op.drop_constraint('fk_employees_level_id', type_='foreignkey')
        batch_op.drop_column('level_id')

    op.drop_table('employee_levels')
