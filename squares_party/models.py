from datetime import datetime, timezone

from squares_party import db


GRID_SIZE = 10
ROLE_PLAYER = 'player'
ROLE_ADMIN = 'admin'


def utcnow():
    return datetime.now(timezone.utc)


def _iso(value):
    return value.isoformat() if value else None


class ApprovedUser(db.Model):
    """Guest list. Only emails in this table may use the site."""
    __tablename__ = 'approved_user'
    id = db.Column(db.Integer, primary_key=True)
    email = db.Column(db.String(255), unique=True, nullable=False, index=True)
    name = db.Column(db.String(255), nullable=True)
    custom_image = db.Column(db.String(255), nullable=True)
    is_admin = db.Column(db.Boolean, default=False, nullable=False)
    added_at = db.Column(db.DateTime, default=utcnow)
    added_by = db.Column(db.String(255), nullable=True)
    notes = db.Column(db.Text, nullable=True)

    def to_dict(self):
        return {
            'id': self.id,
            'email': self.email,
            'name': self.name,
            'custom_image': self.custom_image,
            'is_admin': self.is_admin,
        }


class SiteSettings(db.Model):
    """Single row of site-wide flags."""
    __tablename__ = 'site_settings'
    id = db.Column(db.Integer, primary_key=True)
    reveal_entries = db.Column(db.Boolean, default=False, nullable=False)
    voting_active = db.Column(db.Boolean, default=False, nullable=False)
    voting_locked = db.Column(db.Boolean, default=False, nullable=False)
    reveal_results = db.Column(db.Boolean, default=False, nullable=False)
    updated_at = db.Column(db.DateTime, default=utcnow, onupdate=utcnow)

    def to_dict(self):
        return {
            'reveal_entries': self.reveal_entries,
            'voting_active': self.voting_active,
            'voting_locked': self.voting_locked,
            'reveal_results': self.reveal_results,
        }


class Game(db.Model):
    __tablename__ = 'game'
    id = db.Column(db.Integer, primary_key=True)
    slug = db.Column(db.String(100), unique=True, nullable=False, index=True)
    name = db.Column(db.String(255), nullable=False)
    is_locked = db.Column(db.Boolean, default=False, nullable=False)
    max_squares_per_user = db.Column(db.Integer, default=5, nullable=False)
    final_home_score = db.Column(db.Integer, nullable=True)
    final_away_score = db.Column(db.Integer, nullable=True)
    created_at = db.Column(db.DateTime, default=utcnow)
    access = db.relationship('GameAccess', back_populates='game', cascade='all, delete-orphan')

    def to_dict(self):
        return {
            'id': self.id,
            'slug': self.slug,
            'name': self.name,
            'is_locked': self.is_locked,
            'max_squares_per_user': self.max_squares_per_user,
            'final_home_score': self.final_home_score,
            'final_away_score': self.final_away_score,
        }


class GameAccess(db.Model):
    __tablename__ = 'game_access'
    __table_args__ = (
        db.UniqueConstraint('game_id', 'user_email', name='uq_game_access_game_user'),
    )
    id = db.Column(db.Integer, primary_key=True)
    game_id = db.Column(db.Integer, db.ForeignKey('game.id'), nullable=False)
    user_email = db.Column(db.String(255), nullable=False, index=True)
    role = db.Column(db.String(20), default=ROLE_PLAYER, nullable=False)
    added_at = db.Column(db.DateTime, default=utcnow)
    added_by = db.Column(db.String(255), nullable=True)
    game = db.relationship('Game', back_populates='access')


class ProxyParticipant(db.Model):
    """An offline guest an admin acts for. Identified by id, never by name."""
    __tablename__ = 'proxy_participant'
    id = db.Column(db.Integer, primary_key=True)
    display_name = db.Column(db.String(255), nullable=False)
    created_by = db.Column(db.String(255), nullable=True)
    created_at = db.Column(db.DateTime, default=utcnow)

    def to_dict(self):
        return {
            'id': self.id,
            'display_name': self.display_name,
            'created_by': self.created_by,
        }


class Square(db.Model):
    __tablename__ = 'square'
    __table_args__ = (
        db.UniqueConstraint('game_id', 'row', 'col', name='uq_square_game_row_col'),
        db.CheckConstraint('(user_email IS NULL) <> (proxy_id IS NULL)', name='ck_square_single_owner'),
    )
    id = db.Column(db.Integer, primary_key=True)
    game_id = db.Column(db.Integer, db.ForeignKey('game.id'), nullable=False, index=True)
    row = db.Column(db.Integer, nullable=False)
    col = db.Column(db.Integer, nullable=False)
    user_email = db.Column(db.String(255), nullable=True, index=True)
    user_name = db.Column(db.String(255), nullable=True)
    user_image = db.Column(db.String(255), nullable=True)
    proxy_id = db.Column(db.Integer, db.ForeignKey('proxy_participant.id'), nullable=True, index=True)
    claimed_at = db.Column(db.DateTime, default=utcnow)
    proxy = db.relationship('ProxyParticipant')

    @property
    def display_name(self):
        if self.proxy is not None:
            return self.proxy.display_name
        return self.user_name or self.user_email

    def to_dict(self):
        return {
            'id': self.id,
            'game_id': self.game_id,
            'row': self.row,
            'col': self.col,
            'user_email': self.user_email,
            'user_name': self.user_name,
            'user_image': self.user_image,
            'proxy_id': self.proxy_id,
            'is_proxy': self.proxy_id is not None,
            'display_name': self.display_name,
            'claimed_at': _iso(self.claimed_at),
        }


class AxisNumber(db.Model):
    __tablename__ = 'axis_number'
    __table_args__ = (
        db.UniqueConstraint('game_id', 'axis', 'position', name='uq_axis_number_game_axis_position'),
    )
    id = db.Column(db.Integer, primary_key=True)
    game_id = db.Column(db.Integer, db.ForeignKey('game.id'), nullable=False, index=True)
    axis = db.Column(db.String(10), nullable=False)  # row, col
    position = db.Column(db.Integer, nullable=False)
    value = db.Column(db.Integer, nullable=False)
    generated_at = db.Column(db.DateTime, default=utcnow)


class QuarterScore(db.Model):
    """Score at the end of a quarter. Shared by every game."""
    __tablename__ = 'quarter_score'
    id = db.Column(db.Integer, primary_key=True)
    quarter = db.Column(db.Integer, unique=True, nullable=False)
    home_score = db.Column(db.Integer, nullable=True)
    away_score = db.Column(db.Integer, nullable=True)
    updated_at = db.Column(db.DateTime, default=utcnow, onupdate=utcnow)

    def to_dict(self):
        return {
            'quarter': self.quarter,
            'home_score': self.home_score,
            'away_score': self.away_score,
        }


class ScorePrediction(db.Model):
    __tablename__ = 'score_prediction'
    __table_args__ = (
        db.UniqueConstraint('game_id', 'user_email', name='uq_score_prediction_game_user'),
        db.UniqueConstraint('game_id', 'proxy_id', name='uq_score_prediction_game_proxy'),
        db.CheckConstraint('(user_email IS NULL) <> (proxy_id IS NULL)', name='ck_score_prediction_single_owner'),
    )
    id = db.Column(db.Integer, primary_key=True)
    game_id = db.Column(db.Integer, db.ForeignKey('game.id'), nullable=False, index=True)
    user_email = db.Column(db.String(255), nullable=True)
    user_name = db.Column(db.String(255), nullable=True)
    proxy_id = db.Column(db.Integer, db.ForeignKey('proxy_participant.id'), nullable=True)
    home_score = db.Column(db.Integer, nullable=False)
    away_score = db.Column(db.Integer, nullable=False)
    is_proxy = db.Column(db.Boolean, default=False, nullable=False)
    created_by = db.Column(db.String(255), nullable=True)
    created_at = db.Column(db.DateTime, default=utcnow)
    updated_at = db.Column(db.DateTime, default=utcnow, onupdate=utcnow)
    proxy = db.relationship('ProxyParticipant')

    @property
    def display_name(self):
        if self.proxy is not None:
            return self.proxy.display_name
        return self.user_name or self.user_email

    def to_dict(self):
        return {
            'id': self.id,
            'game_id': self.game_id,
            'user_email': self.user_email,
            'user_name': self.user_name,
            'proxy_id': self.proxy_id,
            'display_name': self.display_name,
            'home_score': self.home_score,
            'away_score': self.away_score,
            'is_proxy': self.is_proxy,
            'created_by': self.created_by,
            'created_at': _iso(self.created_at),
        }


class Entry(db.Model):
    """Potluck entry. One per guest."""
    __tablename__ = 'entry'
    __table_args__ = (
        db.CheckConstraint('(user_email IS NULL) <> (proxy_id IS NULL)', name='ck_entry_single_owner'),
    )
    id = db.Column(db.Integer, primary_key=True)
    title = db.Column(db.String(255), nullable=False)
    description = db.Column(db.Text, nullable=False)
    needs_power = db.Column(db.Boolean, default=False, nullable=False)
    notes = db.Column(db.Text, nullable=True)
    user_email = db.Column(db.String(255), unique=True, nullable=True)
    user_name = db.Column(db.String(255), nullable=True)
    proxy_id = db.Column(db.Integer, db.ForeignKey('proxy_participant.id'), unique=True, nullable=True)
    created_at = db.Column(db.DateTime, default=utcnow)
    updated_at = db.Column(db.DateTime, default=utcnow, onupdate=utcnow)
    proxy = db.relationship('ProxyParticipant')

    @property
    def display_name(self):
        if self.proxy is not None:
            return self.proxy.display_name
        return self.user_name or self.user_email

    def to_dict(self, include_details=True):
        data = {
            'id': self.id,
            'user_email': self.user_email,
            'user_name': self.user_name,
            'proxy_id': self.proxy_id,
            'is_proxy': self.proxy_id is not None,
            'display_name': self.display_name,
            'created_at': _iso(self.created_at),
        }
        if include_details:
            data.update({
                'title': self.title,
                'description': self.description,
                'needs_power': self.needs_power,
                'notes': self.notes,
            })
        return data


class Vote(db.Model):
    """A guest's ranked top three entries."""
    __tablename__ = 'vote'
    __table_args__ = (
        db.CheckConstraint('(voter_email IS NULL) <> (proxy_id IS NULL)', name='ck_vote_single_owner'),
    )
    id = db.Column(db.Integer, primary_key=True)
    voter_email = db.Column(db.String(255), unique=True, nullable=True)
    voter_name = db.Column(db.String(255), nullable=True)
    proxy_id = db.Column(db.Integer, db.ForeignKey('proxy_participant.id'), unique=True, nullable=True)
    first_place_entry_id = db.Column(db.Integer, nullable=False)
    second_place_entry_id = db.Column(db.Integer, nullable=False)
    third_place_entry_id = db.Column(db.Integer, nullable=False)
    created_at = db.Column(db.DateTime, default=utcnow)
    updated_at = db.Column(db.DateTime, default=utcnow, onupdate=utcnow)
    proxy = db.relationship('ProxyParticipant')

    @property
    def ranked_entry_ids(self):
        return [self.first_place_entry_id, self.second_place_entry_id, self.third_place_entry_id]

    def to_dict(self):
        return {
            'id': self.id,
            'voter_email': self.voter_email,
            'voter_name': self.voter_name,
            'proxy_id': self.proxy_id,
            'first_place_entry_id': self.first_place_entry_id,
            'second_place_entry_id': self.second_place_entry_id,
            'third_place_entry_id': self.third_place_entry_id,
        }
