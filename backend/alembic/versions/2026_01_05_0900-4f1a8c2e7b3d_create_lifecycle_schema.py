"""create_lifecycle_schema

Revision ID: 4f1a8c2e7b3d
Revises:
Create Date: 2026-01-05 09:00:00.000000

"""
from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

# revision identifiers, used by Alembic.
revision = '4f1a8c2e7b3d'
down_revision = None
branch_labels = None
depends_on = None

ENUMS = {
    'user_role': ('investor', 'startup', 'investment_advisor', 'admin'),
    'gate_status': ('not_required', 'pending', 'approved', 'rejected'),
    'investment_offer_status': (
        'pending_investor_advisor_approval', 'pending_startup_advisor_approval', 'pending',
        'accepted', 'rejected', 'investor_advisor_rejected', 'startup_advisor_rejected',
    ),
    'co_investment_opportunity_status': ('active', 'inactive', 'completed', 'cancelled'),
    'co_investment_offer_status': (
        'pending_investor_advisor_approval', 'pending_lead_investor_approval', 'pending_startup_approval',
        'accepted', 'rejected', 'investor_advisor_rejected', 'lead_investor_rejected',
    ),
    'lifecycle_item_kind': ('offer', 'co_investment_opportunity', 'co_investment_offer'),
    'lifecycle_gate': ('investor_advisor', 'lead_investor', 'startup_advisor', 'startup_final'),
    'lifecycle_decision': ('approve', 'reject'),
}


def _enum(name: str) -> postgresql.ENUM:
    return postgresql.ENUM(*ENUMS[name], name=name, create_type=False)


def _timestamps():
    return [
        sa.Column('id', postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('now()'), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.text('now()'), nullable=False),
    ]


def upgrade() -> None:
    bind = op.get_bind()
    for name, values in ENUMS.items():
        postgresql.ENUM(*values, name=name).create(bind, checkfirst=True)

    op.create_table('users',
    *_timestamps(),
    sa.Column('email', sa.String(length=255), nullable=False),
    sa.Column('name', sa.String(length=255), nullable=True),
    sa.Column('role', _enum('user_role'), nullable=False),
    sa.Column('advisor_code', sa.String(length=50), nullable=True),
    sa.Column('investment_advisor_code', sa.String(length=50), nullable=True),
    sa.Column('investment_advisor_code_entered', sa.String(length=50), nullable=True),
    sa.PrimaryKeyConstraint('id')
    )
    op.create_index(op.f('ix_users_email'), 'users', ['email'], unique=True)
    op.create_index(op.f('ix_users_advisor_code'), 'users', ['advisor_code'], unique=True)
    op.create_index(op.f('ix_users_investment_advisor_code'), 'users', ['investment_advisor_code'], unique=False)
    op.create_index(op.f('ix_users_investment_advisor_code_entered'), 'users', ['investment_advisor_code_entered'], unique=False)

    op.create_table('startups',
    *_timestamps(),
    sa.Column('name', sa.String(length=255), nullable=False),
    sa.Column('sector', sa.String(length=100), nullable=True),
    sa.Column('owner_user_id', postgresql.UUID(as_uuid=True), nullable=False),
    sa.Column('investment_advisor_code', sa.String(length=50), nullable=True),
    sa.ForeignKeyConstraint(['owner_user_id'], ['users.id'], name='fk_startups_owner_user_id'),
    sa.PrimaryKeyConstraint('id')
    )
    op.create_index(op.f('ix_startups_name'), 'startups', ['name'], unique=False)
    op.create_index(op.f('ix_startups_owner_user_id'), 'startups', ['owner_user_id'], unique=False)
    op.create_index(op.f('ix_startups_investment_advisor_code'), 'startups', ['investment_advisor_code'], unique=False)

    op.create_table('listings',
    *_timestamps(),
    sa.Column('startup_id', postgresql.UUID(as_uuid=True), nullable=False),
    sa.Column('name', sa.String(length=255), nullable=False),
    sa.Column('investment_type', sa.String(length=50), nullable=False),
    sa.Column('investment_value', sa.Numeric(precision=24, scale=2), nullable=False),
    sa.Column('equity_allocation', sa.Numeric(precision=7, scale=4), nullable=False),
    sa.Column('sector', sa.String(length=100), nullable=True),
    sa.ForeignKeyConstraint(['startup_id'], ['startups.id'], name='fk_listings_startup_id'),
    sa.PrimaryKeyConstraint('id'),
    sa.UniqueConstraint('startup_id', name='uq_listings_startup_id')
    )
    op.create_index(op.f('ix_listings_startup_id'), 'listings', ['startup_id'], unique=False)

    op.create_table('co_investment_opportunities',
    *_timestamps(),
    sa.Column('startup_id', postgresql.UUID(as_uuid=True), nullable=False),
    sa.Column('lead_investor_id', postgresql.UUID(as_uuid=True), nullable=False),
    sa.Column('listing_id', postgresql.UUID(as_uuid=True), nullable=True),
    sa.Column('investment_amount', sa.Numeric(precision=24, scale=2), nullable=False),
    sa.Column('equity_percentage', sa.Numeric(precision=7, scale=4), nullable=False),
    sa.Column('minimum_co_investment', sa.Numeric(precision=24, scale=2), nullable=True),
    sa.Column('maximum_co_investment', sa.Numeric(precision=24, scale=2), nullable=True),
    sa.Column('currency', sa.String(length=3), nullable=False),
    sa.Column('description', sa.Text(), nullable=True),
    sa.Column('stage', sa.Integer(), nullable=False),
    sa.Column('status', _enum('co_investment_opportunity_status'), nullable=False),
    sa.Column('lead_investor_advisor_approval', _enum('gate_status'), nullable=False),
    sa.Column('startup_advisor_approval', _enum('gate_status'), nullable=False),
    sa.Column('startup_approval_status', _enum('gate_status'), nullable=False),
    sa.CheckConstraint('stage >= 1 AND stage <= 4', name='check_co_investment_opportunity_stage_range'),
    sa.CheckConstraint('investment_amount > 0', name='check_co_investment_opportunity_amount_positive'),
    sa.CheckConstraint(
        'minimum_co_investment IS NULL OR maximum_co_investment IS NULL OR minimum_co_investment <= maximum_co_investment',
        name='check_co_investment_opportunity_ticket_bounds',
    ),
    sa.ForeignKeyConstraint(['startup_id'], ['startups.id'], name='fk_co_investment_opportunities_startup_id'),
    sa.ForeignKeyConstraint(['lead_investor_id'], ['users.id'], name='fk_co_investment_opportunities_lead_investor_id'),
    sa.ForeignKeyConstraint(['listing_id'], ['listings.id'], name='fk_co_investment_opportunities_listing_id'),
    sa.PrimaryKeyConstraint('id')
    )
    op.create_index(op.f('ix_co_investment_opportunities_startup_id'), 'co_investment_opportunities', ['startup_id'], unique=False)
    op.create_index(op.f('ix_co_investment_opportunities_lead_investor_id'), 'co_investment_opportunities', ['lead_investor_id'], unique=False)
    op.create_index(op.f('ix_co_investment_opportunities_status'), 'co_investment_opportunities', ['status'], unique=False)
    op.create_index(
        'uq_co_investment_opportunities_active_pair',
        'co_investment_opportunities',
        ['startup_id', 'lead_investor_id'],
        unique=True,
        postgresql_where=sa.text("status = 'active'"),
    )

    op.create_table('investment_offers',
    *_timestamps(),
    sa.Column('investor_id', postgresql.UUID(as_uuid=True), nullable=False),
    sa.Column('startup_id', postgresql.UUID(as_uuid=True), nullable=False),
    sa.Column('listing_id', postgresql.UUID(as_uuid=True), nullable=True),
    sa.Column('opportunity_id', postgresql.UUID(as_uuid=True), nullable=True),
    sa.Column('offer_amount', sa.Numeric(precision=24, scale=2), nullable=False),
    sa.Column('equity_percentage', sa.Numeric(precision=7, scale=4), nullable=False),
    sa.Column('currency', sa.String(length=3), nullable=False),
    sa.Column('stage', sa.Integer(), nullable=False),
    sa.Column('status', _enum('investment_offer_status'), nullable=False),
    sa.Column('investor_advisor_approval', _enum('gate_status'), nullable=False),
    sa.Column('startup_advisor_approval', _enum('gate_status'), nullable=False),
    sa.Column('startup_approval_status', _enum('gate_status'), nullable=False),
    sa.Column('contact_details_revealed', sa.Boolean(), nullable=False),
    sa.CheckConstraint('stage >= 1 AND stage <= 4', name='check_investment_offer_stage_range'),
    sa.CheckConstraint('offer_amount > 0', name='check_investment_offer_amount_positive'),
    sa.CheckConstraint('equity_percentage >= 0 AND equity_percentage <= 100', name='check_investment_offer_equity_range'),
    sa.ForeignKeyConstraint(['investor_id'], ['users.id'], name='fk_investment_offers_investor_id'),
    sa.ForeignKeyConstraint(['startup_id'], ['startups.id'], name='fk_investment_offers_startup_id'),
    sa.ForeignKeyConstraint(['listing_id'], ['listings.id'], name='fk_investment_offers_listing_id'),
    sa.ForeignKeyConstraint(['opportunity_id'], ['co_investment_opportunities.id'], name='fk_investment_offers_opportunity_id'),
    sa.PrimaryKeyConstraint('id'),
    sa.UniqueConstraint('investor_id', 'startup_id', name='uq_investment_offers_investor_startup')
    )
    op.create_index(op.f('ix_investment_offers_investor_id'), 'investment_offers', ['investor_id'], unique=False)
    op.create_index(op.f('ix_investment_offers_startup_id'), 'investment_offers', ['startup_id'], unique=False)
    op.create_index(op.f('ix_investment_offers_listing_id'), 'investment_offers', ['listing_id'], unique=False)
    op.create_index(op.f('ix_investment_offers_status'), 'investment_offers', ['status'], unique=False)
    op.create_index('idx_investment_offers_startup_stage', 'investment_offers', ['startup_id', 'stage'], unique=False)

    op.create_table('co_investment_offers',
    *_timestamps(),
    sa.Column('opportunity_id', postgresql.UUID(as_uuid=True), nullable=False),
    sa.Column('co_investor_id', postgresql.UUID(as_uuid=True), nullable=False),
    sa.Column('lead_investor_id', postgresql.UUID(as_uuid=True), nullable=False),
    sa.Column('startup_id', postgresql.UUID(as_uuid=True), nullable=False),
    sa.Column('offer_amount', sa.Numeric(precision=24, scale=2), nullable=False),
    sa.Column('equity_percentage', sa.Numeric(precision=7, scale=4), nullable=False),
    sa.Column('currency', sa.String(length=3), nullable=False),
    sa.Column('stage', sa.Integer(), nullable=False),
    sa.Column('status', _enum('co_investment_offer_status'), nullable=False),
    sa.Column('investor_advisor_approval_status', _enum('gate_status'), nullable=False),
    sa.Column('lead_investor_approval_status', _enum('gate_status'), nullable=False),
    sa.Column('startup_approval_status', _enum('gate_status'), nullable=False),
    sa.CheckConstraint('stage >= 1 AND stage <= 4', name='check_co_investment_offer_stage_range'),
    sa.CheckConstraint('offer_amount > 0', name='check_co_investment_offer_amount_positive'),
    sa.ForeignKeyConstraint(['opportunity_id'], ['co_investment_opportunities.id'], name='fk_co_investment_offers_opportunity_id'),
    sa.ForeignKeyConstraint(['co_investor_id'], ['users.id'], name='fk_co_investment_offers_co_investor_id'),
    sa.ForeignKeyConstraint(['lead_investor_id'], ['users.id'], name='fk_co_investment_offers_lead_investor_id'),
    sa.ForeignKeyConstraint(['startup_id'], ['startups.id'], name='fk_co_investment_offers_startup_id'),
    sa.PrimaryKeyConstraint('id')
    )
    op.create_index(op.f('ix_co_investment_offers_opportunity_id'), 'co_investment_offers', ['opportunity_id'], unique=False)
    op.create_index(op.f('ix_co_investment_offers_co_investor_id'), 'co_investment_offers', ['co_investor_id'], unique=False)
    op.create_index(op.f('ix_co_investment_offers_lead_investor_id'), 'co_investment_offers', ['lead_investor_id'], unique=False)
    op.create_index(op.f('ix_co_investment_offers_startup_id'), 'co_investment_offers', ['startup_id'], unique=False)
    op.create_index(op.f('ix_co_investment_offers_status'), 'co_investment_offers', ['status'], unique=False)
    op.create_index('idx_co_investment_offers_opportunity_status', 'co_investment_offers', ['opportunity_id', 'status'], unique=False)

    op.create_table('offer_events',
    *_timestamps(),
    sa.Column('item_kind', _enum('lifecycle_item_kind'), nullable=False),
    sa.Column('item_id', postgresql.UUID(as_uuid=True), nullable=False),
    sa.Column('action', sa.String(length=50), nullable=False),
    sa.Column('gate', _enum('lifecycle_gate'), nullable=True),
    sa.Column('decision', _enum('lifecycle_decision'), nullable=True),
    sa.Column('actor_id', postgresql.UUID(as_uuid=True), nullable=True),
    sa.Column('stage_before', sa.Integer(), nullable=True),
    sa.Column('stage_after', sa.Integer(), nullable=True),
    sa.Column('status_after', sa.String(length=50), nullable=True),
    sa.Column('details', sa.JSON(), nullable=True),
    sa.Column('sequence', sa.Integer(), nullable=False),
    sa.PrimaryKeyConstraint('id')
    )
    op.create_index(op.f('ix_offer_events_item_id'), 'offer_events', ['item_id'], unique=False)
    op.create_index(op.f('ix_offer_events_actor_id'), 'offer_events', ['actor_id'], unique=False)
    op.create_index('idx_offer_events_item', 'offer_events', ['item_kind', 'item_id', 'sequence'], unique=False)


def downgrade() -> None:
    op.drop_table('offer_events')
    op.drop_table('co_investment_offers')
    op.drop_table('investment_offers')
    op.drop_table('co_investment_opportunities')
    op.drop_table('listings')
    op.drop_table('startups')
    op.drop_table('users')

    bind = op.get_bind()
    for name in reversed(list(ENUMS)):
        postgresql.ENUM(name=name).drop(bind, checkfirst=True)
