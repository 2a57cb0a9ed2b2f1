"""Concrete implementations: the MusicBrainz client and the bundled cache gates."""
