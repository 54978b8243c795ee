"""Initial house points schema.

Revision ID: a1b2c3d4e5f6
Revises:
Create Date: 2026-10-19
"""
from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision = 'a1b2c3d4e5f6'
down_revision = None
branch_labels = None
depends_on = None


def upgrade():
    """Create houses, classes, users, categories, ledger and rewards tables."""
    op.create_table(
        'houses',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('name', sa.String(100), nullable=False),
        sa.Column('color', sa.String(20), nullable=False),
        sa.Column('description', sa.String(500), nullable=True),
        sa.Column('logo_url', sa.String(500), nullable=True),
        sa.Column('points', sa.Integer(), nullable=False, server_default='0'),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('name')
    )

    op.create_table(
        'classes',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('name', sa.String(100), nullable=False),
        sa.Column('description', sa.String(500), nullable=True),
        sa.Column('house_id', sa.Integer(), nullable=True),
        sa.ForeignKeyConstraint(['house_id'], ['houses.id'], ondelete='SET NULL'),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('name')
    )
    op.create_index('ix_classes_house_id', 'classes', ['house_id'])

    op.create_table(
        'users',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('username', sa.String(100), nullable=False),
        sa.Column('password_hash', sa.String(255), nullable=False),
        sa.Column('first_name', sa.String(100), nullable=False),
        sa.Column('last_name', sa.String(100), nullable=False),
        sa.Column('email', sa.String(255), nullable=False),
        sa.Column('role', sa.String(20), nullable=False),
        sa.Column('grade_level', sa.String(20), nullable=True),
        sa.Column('section', sa.String(20), nullable=True),
        sa.Column('parent_id', sa.Integer(), nullable=True),
        sa.Column('class_id', sa.Integer(), nullable=True),
        sa.Column('house_id', sa.Integer(), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=True),
        sa.ForeignKeyConstraint(['parent_id'], ['users.id'], ondelete='SET NULL'),
        sa.ForeignKeyConstraint(['class_id'], ['classes.id'], ondelete='SET NULL'),
        sa.ForeignKeyConstraint(['house_id'], ['houses.id'], ondelete='SET NULL'),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('username'),
        sa.UniqueConstraint('email')
    )
    op.create_index('ix_users_role', 'users', ['role'])
    op.create_index('ix_users_class_id', 'users', ['class_id'])
    op.create_index('ix_users_house_id', 'users', ['house_id'])

    op.create_table(
        'behavior_categories',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('name', sa.String(100), nullable=False),
        sa.Column('description', sa.String(500), nullable=True),
        sa.Column('is_positive', sa.Boolean(), nullable=False),
        sa.Column('point_value', sa.Integer(), nullable=False),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('name')
    )

    op.create_table(
        'point_transactions',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('student_id', sa.Integer(), nullable=False),
        sa.Column('author_id', sa.Integer(), nullable=False),
        sa.Column('category_id', sa.Integer(), nullable=False),
        sa.Column('points', sa.Integer(), nullable=False),
        sa.Column('note', sa.String(500), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=True),
        sa.ForeignKeyConstraint(['student_id'], ['users.id'], ),
        sa.ForeignKeyConstraint(['author_id'], ['users.id'], ),
        sa.ForeignKeyConstraint(['category_id'], ['behavior_categories.id'], ),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index('ix_point_transactions_student_id', 'point_transactions', ['student_id'])
    op.create_index('ix_point_transactions_author_id', 'point_transactions', ['author_id'])
    op.create_index('ix_point_transactions_created_at', 'point_transactions', ['created_at'])

    op.create_table(
        'rewards',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('name', sa.String(200), nullable=False),
        sa.Column('description', sa.String(500), nullable=True),
        sa.Column('point_cost', sa.Integer(), nullable=False),
        sa.Column('quantity', sa.Integer(), nullable=False),
        sa.Column('image_url', sa.String(500), nullable=True),
        sa.CheckConstraint('quantity >= 0', name='ck_rewards_quantity_non_negative'),
        sa.CheckConstraint('point_cost > 0', name='ck_rewards_point_cost_positive'),
        sa.PrimaryKeyConstraint('id')
    )

    op.create_table(
        'reward_redemptions',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('student_id', sa.Integer(), nullable=False),
        sa.Column('reward_id', sa.Integer(), nullable=False),
        sa.Column('points_spent', sa.Integer(), nullable=False),
        sa.Column('status', sa.String(20), nullable=False),
        sa.Column('redeemed_by', sa.Integer(), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=True),
        sa.ForeignKeyConstraint(['student_id'], ['users.id'], ),
        sa.ForeignKeyConstraint(['reward_id'], ['rewards.id'], ),
        sa.ForeignKeyConstraint(['redeemed_by'], ['users.id'], ),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index('ix_reward_redemptions_student_id', 'reward_redemptions', ['student_id'])


def downgrade():
    """Drop all house points tables."""
    op.drop_index('ix_reward_redemptions_student_id', 'reward_redemptions')
    op.drop_table('reward_redemptions')
    op.drop_table('rewards')
    op.drop_index('ix_point_transactions_created_at', 'point_transactions')
    op.drop_index('ix_point_transactions_author_id', 'point_transactions')
    op.drop_index('ix_point_transactions_student_id', 'point_transactions')
    op.drop_table('point_transactions')
    op.drop_table('behavior_categories')
    op.drop_index('ix_users_house_id', 'users')
    op.drop_index('ix_users_class_id', 'users')
    op.drop_index('ix_users_role', 'users')
    op.drop_table('users')
    op.drop_index('ix_classes_house_id', 'classes')
    op.drop_table('classes')
    op.drop_table('houses')
