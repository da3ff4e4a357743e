"""
Archiver App - Retention Archival of IoT Tables

Responsibilities:
- Read rows older than the retention cutoff (90 days) from each configured
  PostgreSQL table, 100 rows per table per run
- Encode the batch into one Snappy-compressed Parquet file
- Upload the file to S3 under a year/month partitioned key
- Delete the archived range from every table, only after a successful upload

Output:
- s3://<S3_BUCKET>/year=YYYY/month=MM/multi_table_[YYYYMMDD_HHMMSS].parquet
- <WORK_DIR>/multi_table_[YYYYMMDD_HHMMSS].parquet (local copy, not removed)
"""
