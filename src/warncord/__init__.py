"""
Warncord - automated escalation for AI-flagged Discord messages

"""
