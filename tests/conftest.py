import os

# must be set before picwall.config is imported
os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("ENVIRONMENT", "test")
os.environ.setdefault("SECRET_KEY", "test-secret-key")
os.environ.setdefault("AWS_S3_BUCKET_NAME", "picwall-test")
os.environ.setdefault("AWS_REGION", "us-east-1")
