"""initial squares party schema

Revision ID: 4c7e91a2b6d0
Revises:
Create Date: 2026-01-24 10:00:00.000000

"""
from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision = '4c7e91a2b6d0'
down_revision = None
branch_labels = None
depends_on = None


def upgrade():
    bind = op.get_bind()
    insp = sa.inspect(bind)
    existing_tables = set(insp.get_table_names())

    if 'approved_user' not in existing_tables:
        op.create_table(
            'approved_user',
            sa.Column('id', sa.Integer(), primary_key=True),
            sa.Column('email', sa.String(length=255), nullable=False, unique=True, index=True),
            sa.Column('name', sa.String(length=255), nullable=True),
            sa.Column('custom_image', sa.String(length=255), nullable=True),
            sa.Column('is_admin', sa.Boolean(), nullable=False, server_default=sa.false()),
            sa.Column('added_at', sa.DateTime(), nullable=True),
            sa.Column('added_by', sa.String(length=255), nullable=True),
            sa.Column('notes', sa.Text(), nullable=True),
        )

    if 'site_settings' not in existing_tables:
        op.create_table(
            'site_settings',
            sa.Column('id', sa.Integer(), primary_key=True),
            sa.Column('reveal_entries', sa.Boolean(), nullable=False, server_default=sa.false()),
            sa.Column('voting_active', sa.Boolean(), nullable=False, server_default=sa.false()),
            sa.Column('voting_locked', sa.Boolean(), nullable=False, server_default=sa.false()),
            sa.Column('reveal_results', sa.Boolean(), nullable=False, server_default=sa.false()),
            sa.Column('updated_at', sa.DateTime(), nullable=True),
        )

    if 'game' not in existing_tables:
        op.create_table(
            'game',
            sa.Column('id', sa.Integer(), primary_key=True),
            sa.Column('slug', sa.String(length=100), nullable=False, unique=True, index=True),
            sa.Column('name', sa.String(length=255), nullable=False),
            sa.Column('is_locked', sa.Boolean(), nullable=False, server_default=sa.false()),
            sa.Column('max_squares_per_user', sa.Integer(), nullable=False, server_default='5'),
            sa.Column('final_home_score', sa.Integer(), nullable=True),
            sa.Column('final_away_score', sa.Integer(), nullable=True),
            sa.Column('created_at', sa.DateTime(), nullable=True),
        )

    if 'game_access' not in existing_tables:
        op.create_table(
            'game_access',
            sa.Column('id', sa.Integer(), primary_key=True),
            sa.Column('game_id', sa.Integer(), sa.ForeignKey('game.id'), nullable=False),
            sa.Column('user_email', sa.String(length=255), nullable=False, index=True),
            sa.Column('role', sa.String(length=20), nullable=False, server_default='player'),
            sa.Column('added_at', sa.DateTime(), nullable=True),
            sa.Column('added_by', sa.String(length=255), nullable=True),
            sa.UniqueConstraint('game_id', 'user_email', name='uq_game_access_game_user'),
        )

    if 'proxy_participant' not in existing_tables:
        op.create_table(
            'proxy_participant',
            sa.Column('id', sa.Integer(), primary_key=True),
            sa.Column('display_name', sa.String(length=255), nullable=False),
            sa.Column('created_by', sa.String(length=255), nullable=True),
            sa.Column('created_at', sa.DateTime(), nullable=True),
        )

    if 'square' not in existing_tables:
        op.create_table(
            'square',
            sa.Column('id', sa.Integer(), primary_key=True),
            sa.Column('game_id', sa.Integer(), sa.ForeignKey('game.id'), nullable=False, index=True),
            sa.Column('row', sa.Integer(), nullable=False),
            sa.Column('col', sa.Integer(), nullable=False),
            sa.Column('user_email', sa.String(length=255), nullable=True, index=True),
            sa.Column('user_name', sa.String(length=255), nullable=True),
            sa.Column('user_image', sa.String(length=255), nullable=True),
            sa.Column('proxy_id', sa.Integer(), sa.ForeignKey('proxy_participant.id'), nullable=True, index=True),
            sa.Column('claimed_at', sa.DateTime(), nullable=True),
            sa.UniqueConstraint('game_id', 'row', 'col', name='uq_square_game_row_col'),
            sa.CheckConstraint('(user_email IS NULL) <> (proxy_id IS NULL)', name='ck_square_single_owner'),
        )

    if 'axis_number' not in existing_tables:
        op.create_table(
            'axis_number',
            sa.Column('id', sa.Integer(), primary_key=True),
            sa.Column('game_id', sa.Integer(), sa.ForeignKey('game.id'), nullable=False, index=True),
            sa.Column('axis', sa.String(length=10), nullable=False),
            sa.Column('position', sa.Integer(), nullable=False),
            sa.Column('value', sa.Integer(), nullable=False),
            sa.Column('generated_at', sa.DateTime(), nullable=True),
            sa.UniqueConstraint('game_id', 'axis', 'position', name='uq_axis_number_game_axis_position'),
        )

    if 'quarter_score' not in existing_tables:
        op.create_table(
            'quarter_score',
            sa.Column('id', sa.Integer(), primary_key=True),
            sa.Column('quarter', sa.Integer(), nullable=False, unique=True),
            sa.Column('home_score', sa.Integer(), nullable=True),
            sa.Column('away_score', sa.Integer(), nullable=True),
            sa.Column('updated_at', sa.DateTime(), nullable=True),
        )

    if 'score_prediction' not in existing_tables:
        op.create_table(
            'score_prediction',
            sa.Column('id', sa.Integer(), primary_key=True),
            sa.Column('game_id', sa.Integer(), sa.ForeignKey('game.id'), nullable=False, index=True),
            sa.Column('user_email', sa.String(length=255), nullable=True),
            sa.Column('user_name', sa.String(length=255), nullable=True),
            sa.Column('proxy_id', sa.Integer(), sa.ForeignKey('proxy_participant.id'), nullable=True),
            sa.Column('home_score', sa.Integer(), nullable=False),
            sa.Column('away_score', sa.Integer(), nullable=False),
            sa.Column('is_proxy', sa.Boolean(), nullable=False, server_default=sa.false()),
            sa.Column('created_by', sa.String(length=255), nullable=True),
            sa.Column('created_at', sa.DateTime(), nullable=True),
            sa.Column('updated_at', sa.DateTime(), nullable=True),
            sa.UniqueConstraint('game_id', 'user_email', name='uq_score_prediction_game_user'),
            sa.UniqueConstraint('game_id', 'proxy_id', name='uq_score_prediction_game_proxy'),
            sa.CheckConstraint('(user_email IS NULL) <> (proxy_id IS NULL)', name='ck_score_prediction_single_owner'),
        )

    if 'entry' not in existing_tables:
        op.create_table(
            'entry',
            sa.Column('id', sa.Integer(), primary_key=True),
            sa.Column('title', sa.String(length=255), nullable=False),
            sa.Column('description', sa.Text(), nullable=False),
            sa.Column('needs_power', sa.Boolean(), nullable=False, server_default=sa.false()),
            sa.Column('notes', sa.Text(), nullable=True),
            sa.Column('user_email', sa.String(length=255), nullable=True, unique=True),
            sa.Column('user_name', sa.String(length=255), nullable=True),
            sa.Column('proxy_id', sa.Integer(), sa.ForeignKey('proxy_participant.id'), nullable=True, unique=True),
            sa.Column('created_at', sa.DateTime(), nullable=True),
            sa.Column('updated_at', sa.DateTime(), nullable=True),
            sa.CheckConstraint('(user_email IS NULL) <> (proxy_id IS NULL)', name='ck_entry_single_owner'),
        )

    if 'vote' not in existing_tables:
        op.create_table(
            'vote',
            sa.Column('id', sa.Integer(), primary_key=True),
            sa.Column('voter_email', sa.String(length=255), nullable=True, unique=True),
            sa.Column('voter_name', sa.String(length=255), nullable=True),
            sa.Column('proxy_id', sa.Integer(), sa.ForeignKey('proxy_participant.id'), nullable=True, unique=True),
            sa.Column('first_place_entry_id', sa.Integer(), nullable=False),
            sa.Column('second_place_entry_id', sa.Integer(), nullable=False),
            sa.Column('third_place_entry_id', sa.Integer(), nullable=False),
            sa.Column('created_at', sa.DateTime(), nullable=True),
            sa.Column('updated_at', sa.DateTime(), nullable=True),
            sa.CheckConstraint('(voter_email IS NULL) <> (proxy_id IS NULL)', name='ck_vote_single_owner'),
        )


def downgrade():
    bind = op.get_bind()
    insp = sa.inspect(bind)
    existing_tables = set(insp.get_table_names())

    # Children first
    for table in (
        'vote', 'entry', 'score_prediction', 'quarter_score', 'axis_number', 'square',
        'proxy_participant', 'game_access', 'game', 'site_settings', 'approved_user',
    ):
        if table in existing_tables:
            op.drop_table(table)
