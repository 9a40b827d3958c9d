"""
Jobboard
An AI-assisted job board: employers post jobs, job seekers apply.

Architecture:
- PostgreSQL: Structured data (users, companies, jobs, applications, scores)
- MongoDB: Documents (resume text, parsed resumes, personality reports)
- Generative AI: match scoring, personality analysis, productivity scoring,
  resume parsing. Results are validated and stored; the database stays
  the source of truth.
"""

__version__ = "1.0.0"
