"""create user, game_state, participant, answer and round_result tables

Revision ID: 5c2a9e4d1b70
Revises:
Create Date: 2026-10-19 10:00:00.000000

"""
from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision = '5c2a9e4d1b70'
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
            sa.Column('id', sa.Integer(), nullable=False),
            sa.Column('username', sa.String(length=64), nullable=False),
            sa.Column('password_hash', sa.String(length=256), nullable=False),
            sa.PrimaryKeyConstraint('id'),
        )
        op.create_index('ix_user_username', 'user', ['username'], unique=True)

    if 'game_state' not in existing_tables:
        op.create_table(
            'game_state',
            sa.Column('id', sa.Integer(), nullable=False),
            sa.Column('phase', sa.String(length=32), nullable=False),
            sa.Column('current_question', sa.Integer(), nullable=False),
            sa.Column('version', sa.Integer(), nullable=False),
            sa.Column('updated_at', sa.DateTime(), nullable=True),
            sa.PrimaryKeyConstraint('id'),
        )

    if 'participant' not in existing_tables:
        op.create_table(
            'participant',
            sa.Column('id', sa.Integer(), nullable=False),
            sa.Column('name', sa.String(length=64), nullable=False),
            sa.Column('submitted', sa.Boolean(), nullable=False),
            sa.Column('current_score', sa.Float(), nullable=False),
            sa.Column('total_score', sa.Float(), nullable=False),
            sa.Column('version', sa.Integer(), nullable=False),
            sa.Column('created_at', sa.DateTime(), nullable=True),
            sa.PrimaryKeyConstraint('id'),
            sqlite_autoincrement=True,
        )
        op.create_index('ix_participant_name', 'participant', ['name'], unique=True)

    if 'answer' not in existing_tables:
        op.create_table(
            'answer',
            sa.Column('id', sa.Integer(), nullable=False),
            sa.Column('participant_id', sa.Integer(), nullable=False),
            sa.Column('question_id', sa.Integer(), nullable=False),
            sa.Column('value', sa.Float(), nullable=False),
            sa.Column('created_at', sa.DateTime(), nullable=True),
            sa.ForeignKeyConstraint(['participant_id'], ['participant.id']),
            sa.PrimaryKeyConstraint('id'),
            sa.UniqueConstraint('participant_id', 'question_id', name='uq_answer_participant_question'),
        )

    if 'round_result' not in existing_tables:
        op.create_table(
            'round_result',
            sa.Column('id', sa.Integer(), nullable=False),
            sa.Column('participant_id', sa.Integer(), nullable=False),
            sa.Column('question_id', sa.Integer(), nullable=False),
            sa.Column('prediction', sa.Float(), nullable=False),
            sa.Column('score', sa.Float(), nullable=False),
            sa.Column('diff', sa.Float(), nullable=False),
            sa.ForeignKeyConstraint(['participant_id'], ['participant.id']),
            sa.PrimaryKeyConstraint('id'),
            sa.UniqueConstraint('participant_id', 'question_id', name='uq_round_result_participant_question'),
        )


def downgrade():
    op.drop_table('round_result')
    op.drop_table('answer')
    op.drop_index('ix_participant_name', table_name='participant')
    op.drop_table('participant')
    op.drop_table('game_state')
    op.drop_index('ix_user_username', table_name='user')
    op.drop_table('user')
