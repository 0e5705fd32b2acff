"""Link unsynced Linear issue notifications to their Slack threads."""
