# Overview: Service layer; each module encapsulates business logic and database work.
