"""
Convention Configuration
Nested tree of partnership agreements: category -> convention -> settings

Every convention entry is a dict with an 'enabled' flag plus its own
parameters. A missing category or key simply means "disabled"; lookups never
raise. Some conventions are mutually exclusive: enabling one member of a
group switches the others off.
"""

import copy
import json
import logging

from errors import ConventionConfigError

logger = logging.getLogger(__name__)


DEFAULT_CONVENTIONS = {
    'opening_bids': {
        'strong_2_clubs': {'enabled': True, 'min_hcp': 22},
        'strong_1_club': {'enabled': False, 'min_hcp': 16},
    },
    'preempts': {
        'weak_two': {'enabled': True, 'min_hcp': 6, 'max_hcp': 10},
        'three_level': {'enabled': True, 'min_hcp': 5, 'max_hcp': 10},
    },
    'notrump_responses': {
        'stayman': {'enabled': True},
        'jacoby_transfers': {'enabled': True},
        'texas_transfers': {'enabled': True},
        'minor_suit_transfers': {'enabled': False},
    },
    'responses': {
        'jacoby_2nt': {'enabled': True},
        'splinter_bids': {'enabled': True},
        'bergen_raises': {'enabled': False},
        'drury': {'enabled': True},
    },
    'ace_asking': {
        'gerber': {
            'enabled': True,
            'continuations': True,
            'responses_map': ['4D', '4H', '4S', '4NT'],
        },
        'blackwood': {'enabled': True, 'variant': 'rkcb', 'responses': '1430'},
    },
    'slam_bidding': {
        'control_showing_cue_bids': {'enabled': True},
    },
    'notrump_defenses': {
        'dont': {'enabled': True, 'min_hcp': 6},
        'meckwell': {'enabled': False, 'min_hcp': 8},
        'unusual_nt': {'enabled': True, 'direct': True, 'passed_hand': False, 'over_minors': False},
        'lebensohl': {'enabled': True, 'fast_denies': True},
    },
    'strong_club_defenses': {
        'meckwell': {'enabled': True, 'min_hcp': 8},
        'dont': {'enabled': False, 'min_hcp': 6},
    },
    'competitive': {
        'michaels': {'enabled': True, 'strength': 'wide_range', 'direct_only': True},
        'negative_doubles': {'enabled': True, 'thru_level': 3},
        'responsive_doubles': {'enabled': True, 'thru_level': 3, 'min_strength': 8},
        'support_doubles': {'enabled': True, 'thru': '2S'},
        'cue_bid_raises': {'enabled': True},
        'reopening_doubles': {'enabled': True},
        'takeout_doubles': {'enabled': True, 'relaxed': False},
        'jordan_2nt': {'enabled': True},
        'advancer_raises': {
            'enabled': True,
            'simple_min_support': 3,
            'simple_range': [6, 9],
            'jump_min_support': 4,
            'jump_range': [11, 12],
            'cuebid_min_support': 4,
            'cuebid_min_hcp': 10,
        },
    },
    'general': {
        'vulnerability_adjustments': {'enabled': True},
        'balanced_shapes': {'enabled': True, 'include_5422': False},
        'nt_over_minors_range': {'enabled': True, 'style': 'classic'},
        'one_notrump_range': {'enabled': True, 'range': [15, 17]},
        'two_notrump_range': {'enabled': True, 'range': [20, 21]},
        'distribution_points': {'enabled': True, 'mode': 'shortness'},
        'systems_on_over_1nt_interference': {
            'enabled': True, 'stayman': False, 'transfers': False, 'stolen_bid_double': False
        },
    },
}

# (category, members): enabling one member switches the others off
EXCLUSIVE_GROUPS = (
    ('opening_bids', ('strong_2_clubs', 'strong_1_club')),
    ('notrump_defenses', ('dont', 'meckwell')),
    ('strong_club_defenses', ('meckwell', 'dont')),
)

# Vulnerability shifts applied to the minimum HCP: (favorable, unfavorable)
VULNERABILITY_ADJUSTMENTS = {
    'overcall': (-1, 1),
    'preempt': (-2, 2),
    'weak_two': (-1, 4),
}


class ConventionConfig:
    """
    Live convention tree

    The engine reads straight from `tree` on every decision, so toggling a
    convention between turns takes effect on the next call.
    """

    def __init__(self, tree=None):
        self.tree = copy.deepcopy(DEFAULT_CONVENTIONS if tree is None else tree)
        self._normalize_groups()

    # ==================== Lookups ====================

    def entry(self, category, key):
        """Settings dict for a convention, or None"""
        section = self.tree.get(category)
        if not isinstance(section, dict):
            return None
        entry = section.get(key)
        return entry if isinstance(entry, dict) else None

    def is_enabled(self, category, key):
        """True only when the entry exists and is switched on"""
        entry = self.entry(category, key)
        return bool(entry and entry.get('enabled', False))

    def setting(self, category, key, name, default=None):
        """Parameter of an enabled or disabled convention, with a default"""
        entry = self.entry(category, key)
        if entry is None:
            return default
        return entry.get(name, default)

    def range(self, category, key, name, default):
        """A [low, high] parameter as a tuple"""
        value = self.setting(category, key, name, default)
        try:
            low, high = value
        except (TypeError, ValueError):
            logger.warning("Bad range %r for %s.%s.%s, using %r", value, category, key, name, default)
            low, high = default
        return int(low), int(high)

    # ==================== Changes ====================

    def enable(self, category, key):
        """Switch a convention on and its group siblings off"""
        entry = self._require(category, key)
        entry['enabled'] = True
        for sibling in self.group_siblings(category, key):
            sibling_entry = self.entry(category, sibling)
            if sibling_entry and sibling_entry.get('enabled'):
                sibling_entry['enabled'] = False
                logger.info("Disabled %s.%s (exclusive with %s)", category, sibling, key)

    def disable(self, category, key):
        self._require(category, key)['enabled'] = False

    def set_enabled(self, category, key, enabled):
        if enabled:
            self.enable(category, key)
        else:
            self.disable(category, key)

    def update(self, category, key, **settings):
        """Change parameters of a convention"""
        entry = self._require(category, key)
        enabled = settings.pop('enabled', None)
        entry.update(settings)
        if enabled is not None:
            self.set_enabled(category, key, enabled)

    def apply_settings(self, settings):
        """
        Merge persisted choices onto the tree

        `settings` mirrors the tree shape. Entries are applied in order, so
        the last enabled member of an exclusive group wins.
        """
        if not isinstance(settings, dict):
            raise ConventionConfigError(f"Settings must be a mapping, got {type(settings).__name__}")
        for category, section in settings.items():
            if not isinstance(section, dict):
                logger.warning("Ignoring settings for %s: not a mapping", category)
                continue
            for key, values in section.items():
                if isinstance(values, bool):
                    values = {'enabled': values}
                if not isinstance(values, dict):
                    logger.warning("Ignoring settings for %s.%s: not a mapping", category, key)
                    continue
                entry = self.tree.setdefault(category, {}).setdefault(key, {'enabled': False})
                values = dict(values)
                enabled = values.pop('enabled', None)
                entry.update(copy.deepcopy(values))
                if enabled is not None:
                    self.set_enabled(category, key, enabled)

    def load_settings(self, path):
        """Apply settings from a JSON file"""
        try:
            with open(path, 'r', encoding='utf-8') as f:
                settings = json.load(f)
        except (OSError, ValueError) as exc:
            raise ConventionConfigError(f"Cannot read settings from {path}: {exc}") from exc
        self.apply_settings(settings)
        logger.info("Loaded convention settings from %s", path)

    def to_dict(self):
        return copy.deepcopy(self.tree)

    # ==================== Helpers ====================

    def group_siblings(self, category, key):
        siblings = []
        for group_category, members in EXCLUSIVE_GROUPS:
            if group_category == category and key in members:
                siblings.extend(member for member in members if member != key)
        return siblings

    def vulnerability_adjustment(self, kind, vulnerable_we, vulnerable_they):
        """Shift to the minimum HCP for an action of `kind` at this vulnerability"""
        if not self.is_enabled('general', 'vulnerability_adjustments'):
            return 0
        favorable, unfavorable = VULNERABILITY_ADJUSTMENTS.get(kind, (0, 0))
        if vulnerable_they and not vulnerable_we:
            return favorable
        if vulnerable_we and not vulnerable_they:
            return unfavorable
        return 0

    def _require(self, category, key):
        entry = self.entry(category, key)
        if entry is None:
            raise ConventionConfigError(f"Unknown convention: {category}.{key}")
        return entry

    def _normalize_groups(self):
        """Keep at most one enabled member per group (first one wins)"""
        for category, members in EXCLUSIVE_GROUPS:
            enabled = [member for member in members if self.is_enabled(category, member)]
            for member in enabled[1:]:
                self.entry(category, member)['enabled'] = False
