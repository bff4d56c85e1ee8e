"""AWS session, client and CloudFormation helpers."""
