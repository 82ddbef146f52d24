"""initial_schema

Revision ID: a7c41e90d2b3
Revises:
Create Date: 2026-10-16 00:00:00.000000

"""
from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision = 'a7c41e90d2b3'
down_revision = None
branch_labels = None
depends_on = None

ELECTION_TYPES = ('Presidential', 'Gubernatorial', 'Senatorial', 'House of Reps', 'State Assembly')


def upgrade():
    op.create_table(
        'profiles',
        sa.Column('id', sa.String(length=36), primary_key=True),
        sa.Column('email', sa.String(length=255), nullable=True, unique=True),
        sa.Column('full_name', sa.String(length=255), nullable=True),
        sa.Column('avatar_url', sa.String(length=500), nullable=True),
        sa.Column('state', sa.String(length=100), nullable=True),
        sa.Column('lga', sa.String(length=100), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=False),
    )

    op.create_table(
        'polls',
        sa.Column('id', sa.String(length=36), primary_key=True),
        sa.Column('title', sa.String(length=500), nullable=False),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('election_type', sa.Enum(*ELECTION_TYPES, name='election_type'), nullable=False),
        sa.Column('state', sa.String(length=100), nullable=True),
        sa.Column('lga', sa.String(length=100), nullable=True),
        sa.Column('creator_id', sa.String(length=36),
                  sa.ForeignKey('profiles.id', ondelete='SET NULL'), nullable=True),
        sa.Column('is_active', sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column('start_date', sa.DateTime(timezone=True), nullable=False),
        sa.Column('end_date', sa.DateTime(timezone=True), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=False),
    )
    op.create_index('idx_polls_election_type', 'polls', ['election_type'])
    op.create_index('idx_polls_state', 'polls', ['state'])
    op.create_index('idx_polls_creator_id', 'polls', ['creator_id'])
    op.create_index('idx_polls_active', 'polls', ['is_active'])

    op.create_table(
        'poll_options',
        sa.Column('id', sa.String(length=36), primary_key=True),
        sa.Column('poll_id', sa.String(length=36),
                  sa.ForeignKey('polls.id', ondelete='CASCADE'), nullable=False),
        sa.Column('candidate_name', sa.String(length=255), nullable=False),
        sa.Column('party_name', sa.String(length=100), nullable=True),
        sa.Column('candidate_image_url', sa.String(length=500), nullable=True),
        sa.Column('display_order', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
    )
    op.create_index('idx_poll_options_poll_id', 'poll_options', ['poll_id'])

    op.create_table(
        'votes',
        sa.Column('id', sa.String(length=36), primary_key=True),
        sa.Column('poll_id', sa.String(length=36),
                  sa.ForeignKey('polls.id', ondelete='CASCADE'), nullable=False),
        sa.Column('option_id', sa.String(length=36),
                  sa.ForeignKey('poll_options.id', ondelete='CASCADE'), nullable=False),
        sa.Column('voter_id', sa.String(length=36),
                  sa.ForeignKey('profiles.id', ondelete='CASCADE'), nullable=True),
        sa.Column('voter_ip_address', sa.String(length=45), nullable=True),
        sa.Column('voted_at', sa.DateTime(timezone=True), nullable=False),
        # One vote per voter per poll
        sa.UniqueConstraint('poll_id', 'voter_id', name='uq_votes_poll_voter'),
    )
    op.create_index('idx_votes_poll_id', 'votes', ['poll_id'])
    op.create_index('idx_votes_option_id', 'votes', ['option_id'])
    op.create_index('idx_votes_voter_id', 'votes', ['voter_id'])
    op.create_index('idx_votes_voted_at', 'votes', ['voted_at'])


def downgrade():
    op.drop_table('votes')
    op.drop_table('poll_options')
    op.drop_table('polls')
    op.drop_table('profiles')
    sa.Enum(name='election_type').drop(op.get_bind(), checkfirst=True)
