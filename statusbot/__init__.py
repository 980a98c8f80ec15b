"""Manuscript status bot: journal portal automation with WhatsApp delivery."""
