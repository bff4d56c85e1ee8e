"""AWS environment cleaner.

Deletes resources from non-production AWS accounts, removing CloudFormation
stacks in export/import dependency order before sweeping standalone resources.
"""

__version__ = "0.4.0"
