"""
Pytest configuration and fixtures for backend tests.

This file sets up test environment variables before any imports,
ensuring that Settings() can be instantiated during test collection.

Pytest automatically loads conftest.py before importing test modules,
so environment variables set here will be available when dumplens
modules are imported.
"""
import os
import tempfile

# Set test environment variables BEFORE any dumplens imports
# Pytest loads conftest.py before test files, so these will be set
# before dumplens.main imports dumplens.core.config which instantiates Settings()
os.environ.setdefault("DATA_DIR", tempfile.mkdtemp(prefix="dumplens-tests-"))
os.environ.setdefault("DEBUG", "true")
os.environ.setdefault("LOG_LEVEL", "DEBUG")
os.environ.setdefault("SENTRY_DSN", "")
os.environ.setdefault("STORE_BUSY_RETRIES", "0")

import pytest  # noqa: E402

# Note: dumplens modules are imported inside fixtures, never at module level
# here, so Settings() only sees the environment prepared above.


@pytest.fixture
def schema_store(tmp_path):
    from dumplens.core.schema_store import SchemaStore

    return SchemaStore(tmp_path / "data")


@pytest.fixture
def ingest(schema_store):
    from dumplens.services.ingest_service import IngestService

    return IngestService(schema_store)


@pytest.fixture
def store_path(tmp_path):
    return tmp_path / "store.db"


MYSQL_DUMP = """\
-- MySQL dump 10.13
/*!40101 SET NAMES utf8mb4 */;
SET FOREIGN_KEY_CHECKS=0;

CREATE TABLE `customers` (
  `id` int(11) NOT NULL AUTO_INCREMENT,
  `name` varchar(100) NOT NULL,
  `email` varchar(255) DEFAULT NULL,
  PRIMARY KEY (`id`),
  KEY `idx_email` (`email`)
) ENGINE=InnoDB AUTO_INCREMENT=3 DEFAULT CHARSET=utf8mb4;

CREATE TABLE `orders` (
  `id` int(11) NOT NULL AUTO_INCREMENT,
  `customer_id` int(11) NOT NULL REFERENCES customers(id),
  `total` decimal(10,2) NOT NULL,
  PRIMARY KEY (`id`)
) ENGINE=InnoDB DEFAULT CHARSET=utf8mb4;

CREATE INDEX idx_orders_customer ON orders (customer_id);

LOCK TABLES `customers` WRITE;
INSERT INTO `customers` (`id`, `name`, `email`) VALUES (1,'Ada','ada@example.com'),(2,'Tunde',NULL);
UNLOCK TABLES;

INSERT INTO `orders` (`id`, `customer_id`, `total`) VALUES (1,1,19.99),(2,2,5.50),(3,1,100.00);
"""

INSERTS_ONLY_DUMP = """\
INSERT INTO orders (id, total, note, paid) VALUES (1, 9.99, 'x', '1');
INSERT INTO orders (id, total, note, paid) VALUES (2, 5.00, 'y', '0');
"""


@pytest.fixture
def mysql_dump():
    return MYSQL_DUMP


@pytest.fixture
def inserts_only_dump():
    return INSERTS_ONLY_DUMP
