"""remotesync: create-or-update sync of local content into remote content stores."""
