"""create user, battle_image, battles and game_session tables

Revision ID: 5c2a9e7f1b3d
Revises:
Create Date: 2026-10-19 00:00:00

"""
from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision = '5c2a9e7f1b3d'
down_revision = None
branch_labels = None
depends_on = None


def upgrade():
    bind = op.get_bind()
    insp = sa.inspect(bind)
    existing_tables = set(insp.get_table_names())

    if 'user' not in existing_tables:
        op.create_table(
            'user',
            sa.Column('id', sa.Integer(), primary_key=True),
            sa.Column('username', sa.String(length=64), nullable=False),
        )
        op.create_index('ix_user_username', 'user', ['username'], unique=True)

    if 'battle_image' not in existing_tables:
        op.create_table(
            'battle_image',
            sa.Column('id', sa.Integer(), primary_key=True),
            sa.Column('name', sa.String(length=128), nullable=False),
            sa.Column('url', sa.String(length=512), nullable=False, server_default=''),
        )
        op.create_index('ix_battle_image_name', 'battle_image', ['name'], unique=True)

    if 'battles' not in existing_tables:
        op.create_table(
            'battles',
            sa.Column('id', sa.Integer(), primary_key=True),
            sa.Column('winner_name', sa.String(length=128), nullable=False),
            sa.Column('loser_name', sa.String(length=128), nullable=False),
            sa.Column('user_id', sa.Integer(), sa.ForeignKey('user.id'), nullable=True),
            sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
        )
        op.create_index('ix_battles_winner_loser', 'battles', ['winner_name', 'loser_name'])
        op.create_index('ix_battles_loser_name', 'battles', ['loser_name'])
        op.create_index('ix_battles_user_id', 'battles', ['user_id'])

    if 'game_session' not in existing_tables:
        op.create_table(
            'game_session',
            sa.Column('id', sa.Integer(), primary_key=True),
            sa.Column('session_code', sa.String(length=16), nullable=True),
            sa.Column('user_id', sa.Integer(), sa.ForeignKey('user.id'), nullable=True),
            sa.Column('phase', sa.String(length=16), nullable=False, server_default='start'),
            sa.Column('return_phase', sa.String(length=16), nullable=True),
            sa.Column('score', sa.Integer(), nullable=False, server_default='0'),
            sa.Column('current_round', sa.Integer(), nullable=False, server_default='1'),
            sa.Column('total_rounds', sa.Integer(), nullable=False, server_default='10'),
            sa.Column('session_winners', sa.Text(), nullable=True),
            sa.Column('pick_in_flight', sa.Boolean(), nullable=False, server_default=sa.false()),
            sa.Column('version', sa.Integer(), nullable=False, server_default='0'),
        )
        op.create_index('ix_game_session_session_code', 'game_session', ['session_code'], unique=True)


def downgrade():
    op.drop_index('ix_game_session_session_code', table_name='game_session')
    op.drop_table('game_session')
    op.drop_index('ix_battles_user_id', table_name='battles')
    op.drop_index('ix_battles_loser_name', table_name='battles')
    op.drop_index('ix_battles_winner_loser', table_name='battles')
    op.drop_table('battles')
    op.drop_index('ix_battle_image_name', table_name='battle_image')
    op.drop_table('battle_image')
    op.drop_index('ix_user_username', table_name='user')
    op.drop_table('user')
