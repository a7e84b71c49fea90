"""Initial schema: users, sessions, trips, days, activities, collections, sharing

Revision ID: 001_initial_schema
Revises:
Create Date: 2025-03-01 12:00:00.000000

"""
from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

# revision identifiers, used by Alembic.
revision = '001_initial_schema'
down_revision = None
branch_labels = None
depends_on = None

activity_category = sa.Enum('CULTURE', 'FOOD', 'TRANSPORT', 'HOTEL', 'LEISURE', name='activitycategory')
friendship_status = sa.Enum('PENDING', 'ACCEPTED', name='friendshipstatus')
collaborator_status = sa.Enum('PENDING', 'ACCEPTED', name='collaboratorstatus')


def upgrade() -> None:
    # Users & auth
    op.create_table(
        'users',
        sa.Column('id', postgresql.UUID(as_uuid=True), primary_key=True),
        sa.Column('email', sa.String(), nullable=False),
        sa.Column('display_name', sa.String(), nullable=True),
        sa.Column('avatar_url', sa.String(), nullable=True),
        sa.Column('password_hash', sa.String(), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=False, server_default=sa.func.now()),
        sa.Column('updated_at', sa.DateTime(), nullable=False, server_default=sa.func.now()),
    )
    op.create_index('ix_users_email', 'users', ['email'], unique=True)

    op.create_table(
        'auth_identities',
        sa.Column('id', postgresql.UUID(as_uuid=True), primary_key=True),
        sa.Column('user_id', postgresql.UUID(as_uuid=True), sa.ForeignKey('users.id', ondelete='CASCADE'), nullable=False),
        sa.Column('provider', sa.String(), nullable=False),
        sa.Column('provider_subject', sa.String(), nullable=False),
        sa.Column('email', sa.String(), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=False, server_default=sa.func.now()),
    )
    op.create_index('ix_auth_identities_user_id', 'auth_identities', ['user_id'])
    op.create_index('ix_auth_identities_provider_subject', 'auth_identities', ['provider', 'provider_subject'], unique=True)

    op.create_table(
        'sessions',
        sa.Column('id', postgresql.UUID(as_uuid=True), primary_key=True),
        sa.Column('user_id', postgresql.UUID(as_uuid=True), sa.ForeignKey('users.id', ondelete='CASCADE'), nullable=False),
        sa.Column('refresh_token_hash', sa.String(), nullable=False, unique=True),
        sa.Column('client_name', sa.String(), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=False, server_default=sa.func.now()),
        sa.Column('expires_at', sa.DateTime(), nullable=False),
        sa.Column('revoked_at', sa.DateTime(), nullable=True),
    )
    op.create_index('ix_sessions_user_id', 'sessions', ['user_id'])

    # Collections & trips
    op.create_table(
        'collections',
        sa.Column('id', postgresql.UUID(as_uuid=True), primary_key=True),
        sa.Column('owner_id', postgresql.UUID(as_uuid=True), sa.ForeignKey('users.id', ondelete='CASCADE'), nullable=False),
        sa.Column('title', sa.String(), nullable=False),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=False, server_default=sa.func.now()),
        sa.Column('updated_at', sa.DateTime(), nullable=False, server_default=sa.func.now()),
    )
    op.create_index('ix_collections_owner_id', 'collections', ['owner_id'])

    op.create_table(
        'trips',
        sa.Column('id', postgresql.UUID(as_uuid=True), primary_key=True),
        sa.Column('owner_id', postgresql.UUID(as_uuid=True), sa.ForeignKey('users.id', ondelete='CASCADE'), nullable=False),
        sa.Column('title', sa.String(), nullable=False),
        sa.Column('destination', sa.String(), nullable=False),
        sa.Column('start_date', sa.Date(), nullable=False),
        sa.Column('end_date', sa.Date(), nullable=False),
        sa.Column('lodging_name', sa.String(), nullable=True),
        sa.Column('arrival_info', sa.String(), nullable=True),
        sa.Column('image_url', sa.String(), nullable=True),
        sa.Column('collection_id', postgresql.UUID(as_uuid=True), sa.ForeignKey('collections.id', ondelete='SET NULL'), nullable=True),
        sa.Column('position', sa.Integer(), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=False, server_default=sa.func.now()),
        sa.Column('updated_at', sa.DateTime(), nullable=False, server_default=sa.func.now()),
    )
    op.create_index('ix_trips_owner_id', 'trips', ['owner_id'])
    op.create_index('ix_trips_collection_id', 'trips', ['collection_id'])

    # Itinerary
    op.create_table(
        'days',
        sa.Column('id', postgresql.UUID(as_uuid=True), primary_key=True),
        sa.Column('trip_id', postgresql.UUID(as_uuid=True), sa.ForeignKey('trips.id', ondelete='CASCADE'), nullable=False),
        sa.Column('date', sa.Date(), nullable=False),
        sa.Column('day_number', sa.Integer(), nullable=False),
        sa.UniqueConstraint('trip_id', 'date', name='uq_days_trip_date'),
    )
    op.create_index('ix_days_trip_id', 'days', ['trip_id'])

    op.create_table(
        'activities',
        sa.Column('id', postgresql.UUID(as_uuid=True), primary_key=True),
        sa.Column('day_id', postgresql.UUID(as_uuid=True), sa.ForeignKey('days.id', ondelete='CASCADE'), nullable=False),
        sa.Column('title', sa.String(), nullable=False),
        sa.Column('category', activity_category, nullable=False),
        sa.Column('start_time', sa.Time(), nullable=True),
        sa.Column('duration_minutes', sa.Integer(), nullable=True),
        sa.Column('notes', sa.Text(), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=False, server_default=sa.func.now()),
        sa.Column('updated_at', sa.DateTime(), nullable=False, server_default=sa.func.now()),
    )
    op.create_index('ix_activities_day_id', 'activities', ['day_id'])

    # Social
    op.create_table(
        'friendships',
        sa.Column('id', postgresql.UUID(as_uuid=True), primary_key=True),
        sa.Column('sender_id', postgresql.UUID(as_uuid=True), sa.ForeignKey('users.id', ondelete='CASCADE'), nullable=False),
        sa.Column('receiver_id', postgresql.UUID(as_uuid=True), sa.ForeignKey('users.id', ondelete='CASCADE'), nullable=False),
        sa.Column('status', friendship_status, nullable=False),
        sa.Column('created_at', sa.DateTime(), nullable=False, server_default=sa.func.now()),
        sa.UniqueConstraint('sender_id', 'receiver_id', name='uq_friendships_pair'),
    )
    op.create_index('ix_friendships_sender_id', 'friendships', ['sender_id'])
    op.create_index('ix_friendships_receiver_id', 'friendships', ['receiver_id'])

    op.create_table(
        'trip_collaborators',
        sa.Column('id', postgresql.UUID(as_uuid=True), primary_key=True),
        sa.Column('trip_id', postgresql.UUID(as_uuid=True), sa.ForeignKey('trips.id', ondelete='CASCADE'), nullable=False),
        sa.Column('user_id', postgresql.UUID(as_uuid=True), sa.ForeignKey('users.id', ondelete='CASCADE'), nullable=False),
        sa.Column('status', collaborator_status, nullable=False),
        sa.Column('created_at', sa.DateTime(), nullable=False, server_default=sa.func.now()),
        sa.UniqueConstraint('trip_id', 'user_id', name='uq_trip_collaborators_trip_user'),
    )
    op.create_index('ix_trip_collaborators_trip_id', 'trip_collaborators', ['trip_id'])
    op.create_index('ix_trip_collaborators_user_status', 'trip_collaborators', ['user_id', 'status'])


def downgrade() -> None:
    op.drop_table('trip_collaborators')
    op.drop_table('friendships')
    op.drop_table('activities')
    op.drop_table('days')
    op.drop_table('trips')
    op.drop_table('collections')
    op.drop_table('sessions')
    op.drop_table('auth_identities')
    op.drop_table('users')

    collaborator_status.drop(op.get_bind(), checkfirst=True)
    friendship_status.drop(op.get_bind(), checkfirst=True)
    activity_category.drop(op.get_bind(), checkfirst=True)
