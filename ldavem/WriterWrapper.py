# -*- coding: utf-8 -*-

import csv


class WriterWrapper:

    def __init__(self, file_name, delimiter='\t', mode='w'):
        """
        Line-buffered delimited writer, every row reaches the disk
        so that a killed run still leaves its history behind.
        """
        self.file_name = file_name
        self.f = open(file_name, mode, encoding='utf-8', newline='')
        self.wr = csv.writer(self.f, delimiter=delimiter, lineterminator='\n')

    def write_row(self, row):
        self.wr.writerow(row)
        self.f.flush()

    def close(self):
        self.f.close()

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()
