"""Call lifecycle tracking.

The registry owns one record and one deadline timer per active call; the
dispatcher feeds it events from the voice platform's webhook.
"""
