"""User-facing text for the ``message`` key returned after an action."""

MESSAGES = {
    # Entries
    'entry_created': ('success', 'Your entry has been submitted!'),
    'entry_updated': ('success', 'Your entry has been updated.'),
    'entry_deleted': ('success', 'Your entry has been deleted.'),
    'proxy_entry_saved': ('success', 'Proxy entry saved.'),
    'proxy_entry_deleted': ('success', 'Proxy entry deleted.'),
    # Votes
    'vote_saved': ('success', 'Your vote has been saved!'),
    'proxy_vote_saved': ('success', 'Proxy vote saved.'),
    'voting_inactive': ('error', 'Voting is not open yet.'),
    'voting_locked': ('error', 'Voting is closed.'),
    # Squares
    'square_claimed': ('success', 'Square claimed!'),
    'square_released': ('success', 'Square released.'),
    'prediction_saved': ('success', 'Your prediction has been saved!'),
    # Profile
    'profile_updated': ('success', 'Your profile has been updated.'),
}


def message(key, **extra):
    """Response body for a successful action identified by ``key``."""
    kind, text = MESSAGES[key]
    body = {'success': kind == 'success', 'message': key, 'text': text}
    body.update(extra)
    return body
