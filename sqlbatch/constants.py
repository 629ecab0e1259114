import pathlib

DEFAULT_CONFIG_FILE = pathlib.Path("sqlbatch.config.yml")
DEFAULT_DRIVER = "mysql.connector"
DEFAULT_DELIMITER = ";"
DEFAULT_OUTPUT_DELIMITER = ","
DEFAULT_INCLUDES = ("**/*.sql",)
MYSQL_DEFAULT_PORT = 3306
WORKDIR_PREFIX = "sqlbatch-"
