"""Rule packs shipped with appvalidator."""
